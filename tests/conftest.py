import pytest
from pathlib import Path
from auth_classifier.classification import TransactionClassifier
from auth_classifier.domain.enums import HttpMethod
from auth_classifier.domain.models import TransactionRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"

@pytest.fixture
def classifier() -> TransactionClassifier:
    """Create a classifier with the built-in chains for each test"""
    return TransactionClassifier()

@pytest.fixture
def make_record():
    """Build a TransactionRecord with sensible defaults"""

    def _make(
        url: str = "https://api.example.com/users/42",
        method: HttpMethod = HttpMethod.GET,
        status: int = 200,
        **kwargs
    ) -> TransactionRecord:
        return TransactionRecord(url=url, method=method, status=status, **kwargs)

    return _make

@pytest.fixture
def sample_api_calls_file() -> Path:
    """Provide a path to an exported API call table"""
    return FIXTURES_DIR / "api_calls.json"

@pytest.fixture
def sample_har_file() -> Path:
    """Provide a path to a devtools HAR export"""
    return FIXTURES_DIR / "capture.har"

@pytest.fixture
def sample_invalid_file() -> Path:
    """Provide a path to a file that is not JSON"""
    return FIXTURES_DIR / "not_json.json"
