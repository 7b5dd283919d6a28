from typing import Optional

from modelcall.config.schemas import ClientConfig
from modelcall.logger import CallLogger
from modelcall.llm.client import ModelCallClient
from modelcall.llm.providers import ModelProvider, StubModelProvider


def create_provider(config: ClientConfig, logger: Optional[CallLogger] = None, **kwargs) -> ModelProvider:
    """
    Create the provider variant for a config.

    Selection happens here, once, from config.provider_type: "stub" gets the
    deterministic StubModelProvider, every HTTP type (openai, openrouter,
    azure) gets a ModelCallClient whose request headers follow that type.

    Args:
        config: Resolved client settings
        logger: Structured logger passed to the HTTP client
        **kwargs: Extra ModelCallClient arguments (session, sleeper, transport)
    """
    if config.provider_type == "stub":
        return StubModelProvider(model=config.model, max_workers=config.max_workers)
    return ModelCallClient(config, logger=logger, **kwargs)
