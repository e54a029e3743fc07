# tests/conftest.py
# settings are read at import time, so the environment is pinned before acaishop loads
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="acaishop-tests-")

os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["PERSISTENCE_MODE"] = "database"
os.environ["LOCAL_DATABASE_PATH"] = os.path.join(_TMP, "local.db")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["MERCADO_PAGO_ACCESS_TOKEN"] = "TEST-token"
os.environ["MERCADO_PAGO_WEBHOOK_SECRET"] = ""
os.environ["PUBLIC_APP_URL"] = "https://loja.example.com"
os.environ["VAPID_PUBLIC_KEY"] = "test-public-key"
os.environ["VAPID_PRIVATE_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
