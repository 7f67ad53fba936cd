import io
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from database import get_db
from schemas.general_ledger import LedgerView
from crud import general_ledger as crud_ledger
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group
from utils.excel_export import build_workbook, XLSX_MEDIA_TYPE

router = APIRouter(
    prefix="/general-ledger",
    tags=["General Ledger"],
)

def _load_view(db: Session, tenant_id: str, account_id, start_date, end_date) -> LedgerView:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date must be on or before end_date")
    view = crud_ledger.get_ledger_view(db, tenant_id, account_id, start_date, end_date)
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account with id {account_id} not found")
    return view

@router.get("/", response_model=LedgerView)
def get_general_ledger(
    account_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return _load_view(db, tenant_id, account_id, start_date, end_date)

@router.get("/export")
def export_general_ledger(
    account_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    view = _load_view(db, tenant_id, account_id, start_date, end_date)
    title = f"Ledger - {view.account_code} {view.account_name}" if view.account_id else "General Ledger"
    period = f"{start_date or 'Beginning'} to {end_date or date.today()}"
    if view.opening_balance is not None:
        period += f" | Opening balance: {view.opening_balance}"

    content = build_workbook(
        title,
        period,
        ["Date", "Account", "Description", "Reference", "Debit", "Credit", "Balance"],
        [
            [
                e.transaction_date.strftime('%d-%m-%Y'),
                f"{e.account_code} {e.account_name}",
                e.description or "",
                f"{e.reference_type} #{e.reference_id}",
                e.debit_amount,
                e.credit_amount,
                e.balance,
            ]
            for e in view.entries
        ],
        ["", "", "TOTAL", "", view.total_debits, view.total_credits,
         view.closing_balance if view.closing_balance is not None else ""],
    )
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="general_ledger.xlsx"'}
    )
