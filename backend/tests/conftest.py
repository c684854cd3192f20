import os
import tempfile

_TEST_DB_DIR = tempfile.mkdtemp(prefix="psychometric-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'psychometric_test.db')}"
# Never reach the real provider from tests; load_dotenv does not override this.
os.environ["OPENAI_API_KEY"] = ""
os.environ.setdefault("SECTION_FAILURE_POLICY", "fail_session")

try:
    from psychometric.db import init_db
except ModuleNotFoundError:  # pragma: no cover - environment dependent
    init_db = None

if init_db is not None:
    init_db()
