import io
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from schemas.financial_reports import TrialBalance, BalanceSheet, ProfitAndLoss, CashFlow, GSTReport
from crud import financial_reports as crud_financial_reports
from datetime import date
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group
from utils.excel_export import build_workbook, XLSX_MEDIA_TYPE

router = APIRouter(
    prefix="/financial-reports",
    tags=["Financial Reports"],
)

@router.get("/trial-balance", response_model=TrialBalance)
def get_trial_balance(
    as_of_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_financial_reports.get_trial_balance(db=db, tenant_id=tenant_id, as_of_date=as_of_date)

@router.get("/trial-balance/export")
def export_trial_balance(
    as_of_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    report = crud_financial_reports.get_trial_balance(db=db, tenant_id=tenant_id, as_of_date=as_of_date)
    content = build_workbook(
        "Trial Balance",
        f"As of {(as_of_date or date.today()).strftime('%d-%m-%Y')}",
        ["Code", "Account", "Type", "Debit", "Credit"],
        [[r.account_code, r.account_name, r.account_type, r.debit, r.credit] for r in report.rows],
        ["", "TOTAL", "", report.total_debit, report.total_credit],
    )
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="trial_balance.xlsx"'}
    )

@router.get("/balance-sheet", response_model=BalanceSheet)
def get_balance_sheet(
    as_of_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_financial_reports.get_balance_sheet(db=db, as_of_date=as_of_date or date.today(), tenant_id=tenant_id)

@router.get("/profit-and-loss", response_model=ProfitAndLoss)
def get_profit_and_loss(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_financial_reports.get_profit_and_loss(
            db=db,
            start_date=start_date,
            end_date=end_date,
            tenant_id=tenant_id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/cash-flow", response_model=CashFlow)
def get_cash_flow(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_financial_reports.get_cash_flow(db=db, start_date=start_date, end_date=end_date, tenant_id=tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/gst", response_model=GSTReport)
def get_gst_report(
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    try:
        return crud_financial_reports.get_gst_report(db=db, start_date=start_date, end_date=end_date, tenant_id=tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
