from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from sqlmorph.config import TranslatorConfig
from sqlmorph.nodes import PropertyFetch, Variable
from sqlmorph.translator import CallSiteDispatcher, TranslationScope

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture
def config() -> TranslatorConfig:
    return TranslatorConfig()


@pytest.fixture
def scope() -> TranslationScope:
    return TranslationScope("test-unit")


@pytest.fixture
def dispatcher(scope: TranslationScope, config: TranslatorConfig) -> CallSiteDispatcher:
    return CallSiteDispatcher(scope, config)


@pytest.fixture
def pdo() -> Variable:
    return Variable("pdo")


@pytest.fixture
def builder_source() -> PropertyFetch:
    return PropertyFetch(Variable("this"), "connection")


@pytest.fixture
def sqlmorph_logger() -> Iterator[logging.Logger]:
    """The package logger, restored to its original state afterwards."""
    logger = logging.getLogger("sqlmorph")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
