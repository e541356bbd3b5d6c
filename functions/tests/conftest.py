"""Pytest configuration and shared fixtures for ObraCost tests."""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from typing import Callable


# ============================================================================
# Ensure local imports work (agents/, models/, services/, config/)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from agents...`.
# This guarantees that `functions/` is importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ============================================================================
# Firebase Mocks
# ============================================================================

@pytest.fixture
def mock_firestore_client():
    """Mock Firestore client."""
    client = MagicMock()

    collection_mock = MagicMock()
    document_mock = MagicMock()

    # Set up chain: client.collection().document()
    client.collection.return_value = collection_mock
    collection_mock.document.return_value = document_mock

    document_mock.get = AsyncMock(return_value=MagicMock(
        exists=True,
        id="inv-1",
        to_dict=lambda: {"invoiceNumber": "2026-001", "status": "draft", "total": 1210.0}
    ))
    document_mock.set = AsyncMock()
    document_mock.update = AsyncMock()
    document_mock.delete = AsyncMock()
    document_mock.id = "tx-new"

    return client


@pytest.fixture
def mock_firestore_service(mock_firestore_client):
    """FirestoreService with mocked client."""
    from services.firestore_service import FirestoreService

    return FirestoreService(db=mock_firestore_client)


@pytest.fixture
def invoice_store():
    """In-memory invoice and ledger store."""
    from tests.fixtures.mock_estimate_data import InMemoryInvoiceStore

    return InMemoryInvoiceStore()


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def generation_config():
    """Explicit generation configuration for tests."""
    from config.settings import GenerationConfig

    return GenerationConfig(model="gpt-4o", api_key="test-api-key", timeout_seconds=5.0)


@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content='{"items": []}',
        response_metadata={"token_usage": {"total_tokens": 100}}
    )
    return mock


@pytest.fixture
def mock_llm_service(generation_config, mock_chat_openai):
    """LLMService wired to the mocked ChatOpenAI client."""
    from services.llm_service import LLMService

    with patch('services.llm_service.ChatOpenAI', return_value=mock_chat_openai):
        service = LLMService(generation_config)
        service._client = mock_chat_openai
        return service


@pytest.fixture
def llm_returning(mock_llm_service) -> Callable[[str], object]:
    """Make the mocked LLM return the given text."""

    def _set(content: str, tokens: int = 120):
        mock_llm_service._client.ainvoke.return_value = MagicMock(
            content=content,
            response_metadata={"token_usage": {"total_tokens": tokens}}
        )
        return mock_llm_service

    return _set


@pytest.fixture
def empty_matcher():
    """Reference matcher with no catalog entries."""
    from services.reference_prices import ReferencePriceMatcher

    return ReferencePriceMatcher(catalog=[])


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_line_items():
    """Priced items as the frontend sends them back."""
    from models.estimate import LineItem
    from tests.fixtures.mock_estimate_data import SAMPLE_LINE_ITEMS

    return [LineItem.model_validate(item) for item in SAMPLE_LINE_ITEMS]
