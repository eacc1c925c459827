"""
Shared pytest configuration for all tests.
Sets up the test environment and common fixtures.
"""
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load test environment variables before any imports
from dotenv import load_dotenv

# Load test-specific environment variables
test_env_path = Path(__file__).parent.parent / ".env.test"
if test_env_path.exists():
    load_dotenv(test_env_path, override=True)
else:
    # Fallback to hardcoded test values if .env.test doesn't exist
    os.environ["RENTDESK_API_SERVERS"] = '["http://server-a/api", "http://server-b/api"]'
    os.environ["RENTDESK_PROXY_BACKEND_URL"] = "http://backend.test/api"
    os.environ["RENTDESK_HEALTH_TIMEOUT"] = "1"
    os.environ["RENTDESK_LOG_LEVEL"] = "DEBUG"

import pytest

from models.equipment import Equipment
from models.rental import Rental
from services.token_store import MemoryTokenStore


@pytest.fixture
def equipment_list():
    """Two equipment items with several instances each."""
    return [
        Equipment(id=1, name="GoPro 13", quantity=3, base_price=45000),
        Equipment(id=2, name="DJI Osmo", quantity=1, base_price=30000),
    ]


@pytest.fixture
def sample_rental():
    return Rental(
        id=10,
        equipment_id=1,
        equipment_instance=2,
        start_date="2024-06-10T09:00:00.000Z",
        end_date="2024-06-12T18:30:00.000Z",
        customer_name="Иван Петров",
        customer_phone="79991234567",
        needs_delivery=True,
        delivery_address="ул. Ленина, 1",
        rental_price=1500,
        delivery_price=300,
        delivery_costs=150,
        source="website",
        comment="Постоянный клиент",
        status="active",
        equipment_name="GoPro 13",
    )


@pytest.fixture
def token_store():
    return MemoryTokenStore("test-token")


def make_response(status_code=200, json_data=None, text=None):
    """Build a mock requests.Response."""
    from unittest.mock import Mock

    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if json_data is not None:
        import json
        response.content = json.dumps(json_data).encode()
        response.json.return_value = json_data
    else:
        response.content = (text or "").encode()
        response.json.side_effect = ValueError("No JSON")
    response.text = text or ""
    response.headers = {"content-type": "application/json"}
    return response
