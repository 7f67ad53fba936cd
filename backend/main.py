from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from database import Base, engine
from datetime import datetime
import os
import models  # registers every table on Base.metadata
import auth
import routers.chart_of_accounts as chart_of_accounts
import routers.financial_periods as financial_periods
import routers.general_ledger as general_ledger
import routers.journal_entry as journal_entry
import routers.financial_reports as financial_reports
import routers.financial_settings as financial_settings
import routers.bank_accounts as bank_accounts
import routers.vendors as vendors
import routers.bills as bills
import routers.invoices as invoices
import routers.expenses as expenses
import routers.budgets as budgets
import routers.gst_returns as gst_returns
import routers.devotees as devotees
import routers.masters as masters
import routers.donations as donations
import routers.pujas as pujas
import routers.staff as staff
import routers.inventory_items as inventory_items
import routers.temple_events as temple_events
import routers.public_events as public_events
import routers.study_materials as study_materials
import routers.courses as courses
import routers.gurukul as gurukul
import routers.users as users
import routers.sheets as sheets
import routers.app_config as app_config
import routers.audit_log as audit_log
import logging
from fastapi.openapi.utils import get_openapi


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# One log file per process start
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE,
    filemode='a'
)

# Mirror the file log on the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler)

logger = logging.getLogger(__name__)
logger.info("Application starting up...")


# Create database tables
Base.metadata.create_all(bind=engine)


app = FastAPI()

allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
)

allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Temple Management API",
        version="1.0.0",
        description="API for temple and ashram administration: devotees, donations, accounting and the Gurukul store",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(app_config.router)
app.include_router(audit_log.router)
# Accounting
app.include_router(chart_of_accounts.router)
app.include_router(financial_periods.router)
app.include_router(general_ledger.router)
app.include_router(journal_entry.router)
app.include_router(financial_reports.router)
app.include_router(financial_settings.router)
app.include_router(bank_accounts.router)
app.include_router(vendors.router)
app.include_router(bills.router)
app.include_router(invoices.router)
app.include_router(expenses.router)
app.include_router(budgets.router)
app.include_router(gst_returns.router)
# Temple operations
app.include_router(devotees.router)
app.include_router(masters.router)
app.include_router(donations.router)
app.include_router(pujas.router)
app.include_router(staff.router)
app.include_router(inventory_items.router)
app.include_router(temple_events.router)
app.include_router(public_events.router)
# Gurukul
app.include_router(study_materials.router)
app.include_router(courses.router)
app.include_router(gurukul.router)
app.include_router(sheets.router)

@app.get("/")
async def test_route():
    return {"message": "Temple Management API is running"}
