import os
from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), '..', 'scripts', '.env')
load_dotenv(dotenv_path=os.path.abspath(env_path))

DB_CONFIG = {
    "host": os.getenv("POSTGRES_HOST"),
    "dbname": os.getenv("POSTGRES_DB"),
    "user": os.getenv("POSTGRES_USER"),
    "password": os.getenv("POSTGRES_PASSWORD"),
}

RAW_ORDERS_PATH = os.getenv("SWIGGY_RAW_ORDERS_PATH", "/app/raw/swiggy_data.csv")
LOG_DIR = os.getenv("SWIGGY_LOG_DIR", "/app/logs")
REPORT_DIR = os.getenv("SWIGGY_REPORT_DIR", "/app/reports")
WAREHOUSE_SCHEMA = os.getenv("SWIGGY_WAREHOUSE_SCHEMA", "warehouse")
BUILD_WORKERS = int(os.getenv("SWIGGY_BUILD_WORKERS", "5"))
