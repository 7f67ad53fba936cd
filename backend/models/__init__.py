from models.users import User, UserProfile
from models.app_config import AppConfig
from models.audit_log import AuditLog
from models.chart_of_accounts import ChartOfAccounts
from models.financial_periods import FinancialPeriod
from models.general_ledger import GeneralLedger
from models.journal_entry import JournalEntry
from models.journal_item import JournalEntryLine
from models.vendors import Vendor
from models.bills import Bill, BillPayment
from models.invoices import Invoice, InvoicePayment
from models.expenses import Expense
from models.bank_accounts import BankAccount, BankTransaction
from models.budgets import Budget
from models.gst_returns import GSTReturn
from models.devotees import Devotee
from models.masters import MasterNakshatra, MasterRashi, MasterGotra, MasterDonationCategory, MasterPuja
from models.donations import Donation
from models.pujas import PujaBooking
from models.staff import Staff
from models.inventory_items import InventoryItem
from models.temple_events import TempleEvent, EventRegistrationAnalytics
from models.study_materials import StudyMaterial, StudyMaterialOrder, OrderItem
from models.courses import CourseModule, CourseLesson, CourseEnrollment, ModuleProgress, UserLessonProgress
from models.saved_sheets import SavedSheet, GoogleToken
from models.financial_settings import FinancialSettings

__all__ = ['AppConfig', 'AuditLog', 'BankAccount', 'BankTransaction', 'Bill', 'BillPayment', 'Budget', 'ChartOfAccounts', 'CourseEnrollment', 'CourseLesson', 'CourseModule', 'Devotee', 'Donation', 'EventRegistrationAnalytics', 'Expense', 'FinancialPeriod', 'FinancialSettings', 'GeneralLedger', 'GoogleToken', 'GSTReturn', 'InventoryItem', 'Invoice', 'InvoicePayment', 'JournalEntry', 'JournalEntryLine', 'MasterDonationCategory', 'MasterGotra', 'MasterNakshatra', 'MasterPuja', 'MasterRashi', 'ModuleProgress', 'OrderItem', 'PujaBooking', 'SavedSheet', 'Staff', 'StudyMaterial', 'StudyMaterialOrder', 'TempleEvent', 'User', 'UserLessonProgress', 'UserProfile', 'Vendor',]
