"""
Tests for short code reservation.
"""
from typing import Optional

import pytest

from shortlink_app.errors import ConflictError, ExhaustedError, ValidationError
from shortlink_app.models.link import CodeSequence, ShortLink
from shortlink_app.services.code_generator import CodeGenerator
from shortlink_app.services.short_code_strategies import (
    Base62ShortCodeStrategy,
    RandomShortCodeStrategy,
    ShortCodeStrategy,
)
from tests.conftest import run


class ScriptedStrategy(ShortCodeStrategy):
    """Proposes a fixed list of candidates, repeating the last one"""

    def __init__(self, candidates):
        super().__init__(length=7)
        self.candidates = list(candidates)
        self.calls = 0

    def generate(self, sequence: Optional[int] = None) -> str:
        self.calls += 1
        if len(self.candidates) > 1:
            return self.candidates.pop(0)
        return self.candidates[0]


@pytest.fixture
def generator(registry):
    return CodeGenerator(registry=registry, strategy=RandomShortCodeStrategy(length=7))


class TestGeneratedCodes:

    def test_codes_are_distinct(self, generator, owner_id):
        first = run(generator.generate(owner_id, "https://example.com/same"))
        second = run(generator.generate(owner_id, "https://example.com/same"))

        assert first.code != second.code
        assert len(first.code) == 7
        assert first.code.isalnum()

    def test_generated_code_resolves(self, generator, registry, owner_id):
        link = run(generator.generate(owner_id, "https://example.com/target"))

        assert run(registry.resolve(link.code)) == "https://example.com/target"

    def test_retries_after_collision(self, registry, owner_id):
        run(registry.create(owner_id, "https://example.com/old", "taken12"))
        strategy = ScriptedStrategy(["taken12", "fresh12"])
        generator = CodeGenerator(registry=registry, strategy=strategy)

        link = run(generator.generate(owner_id, "https://example.com/new"))

        assert link.code == "fresh12"
        assert strategy.calls == 2
        assert run(registry.resolve("taken12")) == "https://example.com/old"

    def test_gives_up_after_max_attempts(self, registry, owner_id, db_session):
        run(registry.create(owner_id, "https://example.com/old", "taken12"))
        strategy = ScriptedStrategy(["taken12"])
        generator = CodeGenerator(registry=registry, strategy=strategy, max_attempts=3)

        with pytest.raises(ExhaustedError):
            run(generator.generate(owner_id, "https://example.com/new"))

        assert strategy.calls == 3
        assert db_session.query(ShortLink).count() == 1

    def test_base62_draws_from_sequence(self, registry, owner_id, db_session):
        generator = CodeGenerator(registry=registry, strategy=Base62ShortCodeStrategy(salt=1256, length=7))

        codes = {run(generator.generate(owner_id, "https://example.com/x")).code for _ in range(5)}

        assert len(codes) == 5
        assert all(len(code) == 7 for code in codes)
        assert db_session.query(CodeSequence).count() == 5

    def test_invalid_destination_rejected_first(self, registry, owner_id, db_session):
        strategy = ScriptedStrategy(["unused1"])
        generator = CodeGenerator(registry=registry, strategy=strategy)

        with pytest.raises(ValidationError):
            run(generator.generate(owner_id, "not a url"))

        assert strategy.calls == 0


class TestCustomAlias:

    def test_alias_is_used_verbatim(self, generator, owner_id):
        link = run(generator.generate(owner_id, "https://example.com/sale", custom_alias="Summer_Sale-2024"))

        assert link.code == "Summer_Sale-2024"

    def test_taken_alias_is_not_retried(self, registry, owner_id, other_owner_id):
        strategy = ScriptedStrategy(["unused1"])
        generator = CodeGenerator(registry=registry, strategy=strategy)
        run(generator.generate(owner_id, "https://example.com/a", custom_alias="promo"))

        with pytest.raises(ConflictError):
            run(generator.generate(other_owner_id, "https://example.com/b", custom_alias="promo"))

        assert strategy.calls == 0

    @pytest.mark.parametrize("alias", [
        "ab",
        "a" * 31,
        "has space",
        "slash/path",
        "émoji",
        "api",
        "Health",
        "docs",
    ])
    def test_rejects_bad_alias(self, generator, owner_id, alias):
        with pytest.raises(ValidationError):
            run(generator.generate(owner_id, "https://example.com/", custom_alias=alias))
