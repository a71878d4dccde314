"""Shared fixtures for ReAG client tests."""

from typing import Any, Awaitable, Callable, List
from unittest.mock import Mock

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.runnables import RunnableLambda

from reag_client.documents import Document


Responder = Callable[[str, str], Awaitable[Any]]


@pytest.fixture
def structured_model_factory() -> Callable[[Responder], Mock]:
    """Builds mock chat models whose structured output is produced by a responder.

    The responder receives the system and human message text of each call.
    Returning a real RunnableLambda from ``with_structured_output`` keeps the
    client's ChatPromptTemplate composition under test.
    """

    def factory(responder: Responder) -> Mock:
        async def respond(prompt_value: Any) -> Any:
            system_message, human_message = prompt_value.to_messages()
            return await responder(system_message.content, human_message.content)

        model = Mock(spec=BaseChatModel)
        model.with_structured_output.return_value = RunnableLambda(respond)
        return model

    return factory


@pytest.fixture
def financial_documents() -> List[Document]:
    """Sample earnings-call excerpts with filterable metadata."""
    return [
        Document(
            name="acme_q1_2023.txt",
            content="Acme reported revenue of $1.2B, up 12% year over year, "
            "driven by strong cloud subscription growth.",
            metadata={"company": "Acme", "year": 2023, "quarter": "Q1", "lang": "en"},
        ),
        Document(
            name="globex_q4_2022.txt",
            content="Globex saw flat revenue as hardware sales declined 8%.",
            metadata={"company": "Globex", "year": 2022, "quarter": "Q4", "lang": "en"},
        ),
        Document(
            name="initech_q2_2023_fr.txt",
            content="Le chiffre d'affaires d'Initech a progressé de 5 %.",
            metadata={"company": "Initech", "year": 2023, "quarter": "Q2", "lang": "fr"},
        ),
        Document(
            name="notes.txt",
            content="Internal notes without any metadata.",
        ),
    ]
