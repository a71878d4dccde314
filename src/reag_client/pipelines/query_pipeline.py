"""Run a ReAG query over a JSON document collection.

Loads a YAML configuration, builds a Groq chat model and a ReagClient, reads
the documents, runs the configured prompt against every document that matches
the metadata filter, and prints one line per result.

Usage:
    python -m reag_client.pipelines.query_pipeline [config.yml]
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from langchain_core.language_models import BaseChatModel
from langchain_groq import ChatGroq

from reag_client import ClientConfiguration, Document, QueryResult, ReagClient
from reag_client.client import DEFAULT_BATCH_SIZE


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "reag_query_config.yml"

REQUIRED_SECTIONS = ("llm", "client", "query")


def load_config(path: str) -> Dict[str, Any]:
    """Loads and validates the pipeline configuration.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The parsed configuration with ``llm``, ``client`` and ``query`` sections.

    Raises:
        ValueError: If a required section or key is missing.
    """
    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}

    missing = [section for section in REQUIRED_SECTIONS if section not in config]
    if missing:
        raise ValueError(f"Configuration is missing sections: {missing}")
    if "model" not in config["llm"]:
        raise ValueError("Configuration 'llm' section must define 'model'.")
    if "system" not in config["client"]:
        raise ValueError("Configuration 'client' section must define 'system'.")
    for key in ("prompt", "documents_path"):
        if key not in config["query"]:
            raise ValueError(f"Configuration 'query' section must define '{key}'.")

    return config


def load_documents(path: str) -> List[Document]:
    """Reads documents from a JSON file holding a list of document objects.

    Each object needs ``name`` and ``content`` and may have ``metadata``.
    """
    records = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"Expected a JSON list of documents in {path}.")
    return [Document.model_validate(record) for record in records]


def build_client(
    config: Dict[str, Any], model: Optional[BaseChatModel] = None
) -> ReagClient:
    """Builds a ReagClient from the ``llm`` and ``client`` config sections.

    Args:
        config: Configuration returned by ``load_config``.
        model: Chat model to use instead of building a ChatGroq model.
    """
    llm_config = config["llm"]
    client_config = config["client"]

    if model is None:
        model = ChatGroq(
            model=llm_config["model"],
            temperature=llm_config.get("temperature", 0),
            max_tokens=llm_config.get("max_tokens"),
            max_retries=llm_config.get("max_retries", 2),
        )

    return ReagClient(
        ClientConfiguration(
            model=model,
            system=client_config["system"].strip(),
            batch_size=client_config.get("batch_size", DEFAULT_BATCH_SIZE),
            max_concurrency=client_config.get("max_concurrency"),
            timeout=client_config.get("timeout"),
            strict_filters=client_config.get("strict_filters", False),
            show_progress=client_config.get("show_progress", True),
        )
    )


def format_result(result: QueryResult[Any]) -> str:
    """Renders a query result as a single JSON line."""
    payload = result.payload
    if hasattr(payload, "model_dump"):
        payload = payload.model_dump()
    return json.dumps(
        {"document": result.document.name, "payload": payload}, ensure_ascii=False
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Run the configured ReAG query and print the results.

    The configuration path is taken from the first argument, defaulting to
    ``reag_query_config.yml`` in the working directory. ``GROQ_API_KEY`` is
    read from the environment or a ``.env`` file.
    """
    logging.basicConfig(level=logging.INFO)

    # Load environment variables
    load_dotenv()

    args = sys.argv[1:] if argv is None else argv
    config_path = args[0] if args else DEFAULT_CONFIG_PATH
    config = load_config(config_path)
    query_config = config["query"]

    logger.info(f"Loading documents: {query_config['documents_path']}")
    documents = load_documents(query_config["documents_path"])

    client = build_client(config)
    results = client.query_sync(
        query_config["prompt"],
        documents,
        filter=query_config.get("filter"),
    )

    logger.info(f"Received {len(results)} results for {len(documents)} documents")
    for result in results:
        print(format_result(result))


if __name__ == "__main__":
    main()
