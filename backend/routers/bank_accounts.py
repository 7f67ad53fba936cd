from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
from database import get_db
from schemas.bank_accounts import (
    BankAccount, BankAccountCreate, BankAccountUpdate, BankTransaction, BankTransactionCreate,
    ReconcileRequest, ReconcileResult, UnreconcileRequest, StatementImportResult, ReconciliationSummary
)
from crud import bank_accounts as crud_bank
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_user_identifier

router = APIRouter(
    prefix="/bank-accounts",
    tags=["Bank Accounts"],
)
logger = logging.getLogger(__name__)

BANK_ACCOUNT_NOT_FOUND = "Bank account not found"

@router.post("/", response_model=BankAccount, status_code=status.HTTP_201_CREATED)
def create_bank_account(
    bank_account: BankAccountCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_bank.create_bank_account(db, bank_account, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[BankAccount])
def get_bank_accounts(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_bank.get_bank_accounts(db, tenant_id, include_inactive)

@router.get("/{bank_account_id}", response_model=BankAccount)
def get_bank_account(
    bank_account_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_account = crud_bank.get_bank_account(db, bank_account_id, tenant_id)
    if not db_account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return db_account

@router.patch("/{bank_account_id}", response_model=BankAccount)
def update_bank_account(
    bank_account_id: int,
    update: BankAccountUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        db_account = crud_bank.update_bank_account(db, bank_account_id, update, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not db_account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return db_account

@router.get("/{bank_account_id}/transactions", response_model=List[BankTransaction])
def get_transactions(
    bank_account_id: int,
    is_reconciled: Optional[bool] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_bank.get_bank_account(db, bank_account_id, tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return crud_bank.get_transactions(db, bank_account_id, tenant_id, is_reconciled, start_date, end_date)

@router.get("/{bank_account_id}/unreconciled", response_model=List[BankTransaction])
def get_unreconciled_transactions(
    bank_account_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_bank.get_bank_account(db, bank_account_id, tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return crud_bank.get_transactions(db, bank_account_id, tenant_id, is_reconciled=False)

@router.post("/{bank_account_id}/transactions", response_model=List[BankTransaction], status_code=status.HTTP_201_CREATED)
def import_transactions(
    bank_account_id: int,
    lines: List[BankTransactionCreate],
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    created = crud_bank.import_transactions(db, bank_account_id, lines, tenant_id, get_user_identifier(user))
    if created is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return created

@router.post("/{bank_account_id}/transactions/upload", response_model=StatementImportResult)
async def upload_statement(
    bank_account_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not file.filename.endswith(('.xls', '.xlsx')):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload an Excel file.")
    contents = await file.read()
    try:
        result = crud_bank.import_statement_excel(db, bank_account_id, contents, tenant_id, get_user_identifier(user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return result

@router.post("/{bank_account_id}/reconcile", response_model=ReconcileResult)
def reconcile_transactions(
    bank_account_id: int,
    request: ReconcileRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        result = crud_bank.reconcile(
            db, bank_account_id, request.transaction_ids, tenant_id, get_user_identifier(user),
            ledger_matches=request.ledger_matches, auto_match=request.auto_match
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return result

@router.post("/{bank_account_id}/unreconcile")
def unreconcile_transactions(
    bank_account_id: int,
    request: UnreconcileRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    result = crud_bank.unreconcile(db, bank_account_id, request.transaction_ids, tenant_id, get_user_identifier(user))
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return {"unreconciled": result}

@router.get("/{bank_account_id}/reconciliation-summary", response_model=ReconciliationSummary)
def get_reconciliation_summary(
    bank_account_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    summary = crud_bank.get_reconciliation_summary(db, bank_account_id, tenant_id)
    if summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BANK_ACCOUNT_NOT_FOUND)
    return summary
