from typing import Optional
from sqlalchemy.orm import Session
from models.gst_returns import GSTReturn
from schemas.gst_returns import GSTReturnUpsert
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
from utils.formatting import to_money
import logging

logger = logging.getLogger(__name__)

def get_gst_return(db: Session, return_id: int, tenant_id: str) -> Optional[GSTReturn]:
    return db.query(GSTReturn).filter(GSTReturn.id == return_id, GSTReturn.tenant_id == tenant_id).first()

def get_gst_returns(db: Session, tenant_id: str, return_type: str = None):
    query = db.query(GSTReturn).filter(GSTReturn.tenant_id == tenant_id)
    if return_type:
        query = query.filter(GSTReturn.return_type == return_type)
    return query.order_by(GSTReturn.return_period.desc(), GSTReturn.return_type).all()

def upsert_gst_return(db: Session, gst_return: GSTReturnUpsert, tenant_id: str, user_id: str = None) -> GSTReturn:
    """One row per (period, return type); saving again overwrites it."""
    data = gst_return.model_dump()
    data['total_tax'] = to_money(gst_return.cgst_amount) + to_money(gst_return.sgst_amount) + to_money(gst_return.igst_amount)
    data['status'] = "Filed" if gst_return.filing_date else "Draft"

    db_return = db.query(GSTReturn).filter(
        GSTReturn.tenant_id == tenant_id,
        GSTReturn.return_period == gst_return.return_period,
        GSTReturn.return_type == gst_return.return_type
    ).first()

    if db_return:
        old_values = sqlalchemy_to_dict(db_return)
        for key, value in data.items():
            setattr(db_return, key, value)
        db_return.updated_by = user_id
        log_change(db, tenant_id, 'gst_returns', db_return, user_id, 'UPDATE', old_values)
    else:
        db_return = GSTReturn(**data, tenant_id=tenant_id, created_by=user_id)
        db.add(db_return)

    db.commit()
    db.refresh(db_return)
    logger.info(f"{db_return.return_type} for {db_return.return_period} saved as {db_return.status} by {user_id}")
    return db_return
