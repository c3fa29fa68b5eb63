from sayso.core.llm.client import LLMClient
from sayso.core.llm.parsing import parse_json

__all__ = ["LLMClient", "parse_json"]
