"""
LLM Provider Implementations

Providers:
    - openai: OpenAI-compatible APIs (OpenAI, llama.cpp, LM Studio, vLLM, Ollama /v1)
"""
from vocabflow.core.llm.providers.openai import OpenAICompatibleProvider

__all__ = ['OpenAICompatibleProvider']
