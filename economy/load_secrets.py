import os
from dotenv import load_dotenv

load_dotenv()

db_backend = os.getenv("DB_BACKEND", "postgres")
user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT")
db_name = os.getenv("DB_NAME")
db_pool_size = int(os.getenv("DB_POOL_SIZE", "20"))
db_max_overflow = int(os.getenv("DB_MAX_OVERFLOW", "20"))
sqlite_path = os.getenv("SQLITE_PATH")
pepper_data = os.getenv("PEPPER_DATA", "")

catalog_base_url = os.getenv("CATALOG_BASE_URL", "https://rickandmortyapi.com/api")
catalog_size = int(os.getenv("CATALOG_SIZE", "826"))
catalog_timeout = float(os.getenv("CATALOG_TIMEOUT", "10"))
catalog_max_attempts = int(os.getenv("CATALOG_MAX_ATTEMPTS", "5"))

memory_session_max_age = int(os.getenv("MEMORY_SESSION_MAX_AGE", "300"))
sweep_interval_seconds = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
log_level = os.getenv("LOG_LEVEL", "INFO")

if __name__ == "__main__":
    print(db_backend, user, host, port, db_name, catalog_base_url, catalog_size)
