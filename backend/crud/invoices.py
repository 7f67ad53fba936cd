import logging
from typing import Optional
from datetime import date

from sqlalchemy.orm import Session, selectinload

from models.invoices import Invoice, InvoicePayment
from models.bills import DocumentPaymentStatus
from models.devotees import Devotee
from models.audit_mixin import now_ist
from schemas.invoices import InvoiceCreate, InvoiceUpdate, InvoicePaymentCreate
from schemas.general_ledger import LedgerLine
from crud import general_ledger as crud_ledger
from crud import financial_settings as crud_settings
from crud import bank_accounts as crud_bank
from crud.bills import payment_status_for, resolve_account
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money, gst_amounts
from utils.document_numbers import generate_document_number, INVOICE_PREFIX

logger = logging.getLogger(__name__)

INVOICE_REFERENCE = "Invoice"
INVOICE_PAYMENT_REFERENCE = "Invoice Payment"

def get_invoice(db: Session, invoice_id: int, tenant_id: str) -> Optional[Invoice]:
    return db.query(Invoice).options(selectinload(Invoice.payments)).filter(
        Invoice.id == invoice_id,
        Invoice.tenant_id == tenant_id
    ).first()

def get_invoices(db: Session, tenant_id: str, status: DocumentPaymentStatus = None, devotee_id: int = None,
                 start_date: date = None, end_date: date = None, skip: int = 0, limit: int = 100):
    query = db.query(Invoice).options(selectinload(Invoice.payments)).filter(Invoice.tenant_id == tenant_id)
    if status:
        query = query.filter(Invoice.status == status)
    if devotee_id:
        query = query.filter(Invoice.devotee_id == devotee_id)
    if start_date:
        query = query.filter(Invoice.invoice_date >= start_date)
    if end_date:
        query = query.filter(Invoice.invoice_date <= end_date)
    return query.order_by(Invoice.invoice_date.desc(), Invoice.id.desc()).offset(skip).limit(limit).all()

def create_invoice(db: Session, invoice: InvoiceCreate, tenant_id: str, user_id: str = None) -> Invoice:
    """
    Raise an invoice and post it:
    Dr Accounts Receivable (total), Cr income (subtotal), Cr GST Payable (gst).
    """
    if invoice.devotee_id is not None:
        devotee = db.query(Devotee).filter(Devotee.id == invoice.devotee_id, Devotee.tenant_id == tenant_id).first()
        if not devotee:
            raise ValueError(f"Devotee {invoice.devotee_id} not found")
    income_account = resolve_account(db, tenant_id, invoice.income_account_id, "Income", 'default_other_income_account_id')
    receivable_account = crud_settings.get_default_account(db, tenant_id, 'default_accounts_receivable_account_id')
    gst_payable = crud_settings.get_default_account(db, tenant_id, 'default_gst_payable_account_id')

    subtotal = to_money(invoice.subtotal)
    gst_amount, total = gst_amounts(subtotal, invoice.gst_rate)

    db_invoice = Invoice(
        **invoice.model_dump(exclude={'income_account_id', 'subtotal'}),
        invoice_number=generate_document_number(db, Invoice.invoice_number, tenant_id, INVOICE_PREFIX, invoice.invoice_date),
        income_account_id=income_account.id,
        subtotal=subtotal,
        gst_amount=gst_amount,
        total_amount=total,
        paid_amount=0,
        status=DocumentPaymentStatus.UNPAID,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_invoice)
    db.flush()

    description = f"Invoice {db_invoice.invoice_number} - {invoice.customer_name}"
    lines = [
        LedgerLine(
            account_id=receivable_account.id,
            debit_amount=total,
            description=description,
            is_gst_applicable=gst_amount > 0,
            gst_rate=invoice.gst_rate if gst_amount > 0 else None,
            gst_amount=gst_amount if gst_amount > 0 else None,
        ),
        LedgerLine(account_id=income_account.id, credit_amount=subtotal, description=description),
    ]
    if gst_amount > 0:
        lines.append(LedgerLine(account_id=gst_payable.id, credit_amount=gst_amount, description=f"GST on {db_invoice.invoice_number}"))

    try:
        crud_ledger.post_transaction(db, tenant_id, invoice.invoice_date, lines, INVOICE_REFERENCE, db_invoice.id, description, user_id)
    except ValueError:
        db.rollback()
        raise

    db.commit()
    db.refresh(db_invoice)
    logger.info(f"Invoice {db_invoice.invoice_number} for {total} raised by {user_id} for tenant {tenant_id}")
    return db_invoice

def update_invoice(db: Session, invoice_id: int, invoice_update: InvoiceUpdate, tenant_id: str, user_id: str):
    db_invoice = get_invoice(db, invoice_id, tenant_id)
    if not db_invoice:
        return None
    old_values = sqlalchemy_to_dict(db_invoice)
    for key, value in invoice_update.model_dump(exclude_unset=True).items():
        setattr(db_invoice, key, value)
    db_invoice.updated_by = user_id
    log_change(db, tenant_id, 'invoices', db_invoice, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_invoice)
    return db_invoice

def record_invoice_payment(db: Session, invoice_id: int, payment: InvoicePaymentCreate, tenant_id: str, user_id: str = None):
    """Receive (part of) an invoice: Dr bank or cash, Cr Accounts Receivable."""
    db_invoice = get_invoice(db, invoice_id, tenant_id)
    if not db_invoice:
        return None

    amount = to_money(payment.amount)
    outstanding = to_money(db_invoice.total_amount) - to_money(db_invoice.paid_amount)
    if outstanding <= 0:
        raise ValueError(f"Invoice {db_invoice.invoice_number} is already fully paid")
    if amount > outstanding:
        raise ValueError(f"Payment amount ({amount}) exceeds the outstanding balance ({outstanding})")

    receivable_account = crud_settings.get_default_account(db, tenant_id, 'default_accounts_receivable_account_id')
    received_into = crud_bank.settlement_account_id(db, tenant_id, payment.bank_account_id)

    db_payment = InvoicePayment(
        **payment.model_dump(exclude={'amount'}),
        amount=amount,
        invoice_id=db_invoice.id,
        tenant_id=tenant_id,
        created_by=user_id,
    )
    db.add(db_payment)
    db.flush()

    description = f"Receipt against invoice {db_invoice.invoice_number} ({payment.payment_mode})"
    lines = [
        LedgerLine(account_id=received_into, debit_amount=amount, description=description),
        LedgerLine(account_id=receivable_account.id, credit_amount=amount, description=description),
    ]
    try:
        crud_ledger.post_transaction(db, tenant_id, payment.payment_date, lines, INVOICE_PAYMENT_REFERENCE, db_payment.id, description, user_id)
    except ValueError:
        db.rollback()
        raise

    db_invoice.paid_amount = to_money(db_invoice.paid_amount) + amount
    db_invoice.status = payment_status_for(db_invoice.paid_amount, db_invoice.total_amount)
    db_invoice.updated_by = user_id
    db.commit()
    db.refresh(db_payment)
    logger.info(f"Payment of {amount} received against invoice {db_invoice.invoice_number}; status {db_invoice.status.value}")
    return db_payment

def delete_invoice(db: Session, invoice_id: int, tenant_id: str, user_id: str) -> bool:
    db_invoice = get_invoice(db, invoice_id, tenant_id)
    if not db_invoice:
        return False
    if crud_ledger.get_entries_for_reference(db, tenant_id, INVOICE_REFERENCE, db_invoice.id):
        raise ValueError("Posted invoices cannot be deleted. Post a reversing journal entry instead.")
    db_invoice.deleted_at = now_ist()
    db_invoice.deleted_by = user_id
    db.commit()
    return True
