import os

DEFAULT_ELASTICSEARCH_URL = "http://localhost:9200"


def get_elasticsearch_url() -> str:
    return os.environ.get("ELASTICSEARCH_URL") or DEFAULT_ELASTICSEARCH_URL


def get_elasticsearch_api_key() -> str | None:
    return os.environ.get("ELASTICSEARCH_API_KEY") or None
