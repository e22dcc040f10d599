"""Unit tests for Thought, valuation and identity models."""

import pytest
from pydantic import ValidationError

from luminous.core.domain import (
    ContextEntry,
    IdentitySnapshot,
    IdentityState,
    IVSMetrics,
    Thought,
    ThoughtMetadata,
    ThoughtSource,
    clamp_unit,
)


class TestIVSMetrics:
    """Test cases for the valuation bundle."""

    def test_defaults(self) -> None:
        metrics = IVSMetrics()

        assert metrics.coherence == 0.5
        assert metrics.complexity == 0.0
        assert metrics.valence == 0.5
        assert metrics.novelty == 0.0
        assert metrics.efficiency == 1.0

    def test_out_of_range_values_clamped(self) -> None:
        metrics = IVSMetrics(coherence=1.7, complexity=-0.2, valence=float("nan"))

        assert metrics.coherence == 1.0
        assert metrics.complexity == 0.0
        assert metrics.valence == 0.0

    def test_bundle_is_immutable(self) -> None:
        metrics = IVSMetrics()

        with pytest.raises(ValidationError):
            metrics.coherence = 0.9

    def test_clamp_unit(self) -> None:
        assert clamp_unit(0.25) == 0.25
        assert clamp_unit(3) == 1.0
        assert clamp_unit(-3) == 0.0


class TestThought:
    """Test cases for Thought records."""

    def test_partner_thought(self) -> None:
        thought = Thought.from_partner("hello")

        assert thought.source == ThoughtSource.PARTNER
        assert thought.content == "hello"
        assert thought.confidence == 1.0
        assert thought.ts > 0
        assert thought.id

    def test_identifiers_unique(self) -> None:
        assert Thought.from_partner("a").id != Thought.from_partner("a").id

    def test_system_fault_zeroes_signals(self) -> None:
        thought = Thought.system_fault("Neural Error: boom")

        assert thought.source == ThoughtSource.SYSTEM
        assert thought.confidence == 0.0
        assert thought.valence == 0.0
        assert thought.attention == 0.0

    def test_confidence_bounded(self) -> None:
        with pytest.raises(ValidationError):
            Thought(source=ThoughtSource.LUMINOUS, content="x", confidence=1.5)

    def test_thought_is_immutable(self) -> None:
        thought = Thought.from_partner("hello")

        with pytest.raises(ValidationError):
            thought.content = "changed"

    def test_record_round_trip(self) -> None:
        thought = Thought(
            source=ThoughtSource.LUMINOUS,
            content="reply",
            confidence=0.51,
            metadata=ThoughtMetadata(valuation=IVSMetrics(coherence=0.51), prediction_error=0.1),
        )

        record = thought.to_record()
        restored = Thought.model_validate(record)

        assert record["source"] == "luminous"
        assert "veto" not in record["metadata"]
        assert restored == thought


class TestIdentityState:
    """Test cases for identity evolution."""

    def test_reflection_appends_and_stamps(self) -> None:
        identity = IdentityState(self_model="Seed.")

        updated = identity.with_reflection(" More.", max_chars=100)

        assert updated.self_model == "Seed. More."
        assert updated.last_meditation > 0
        assert identity.self_model == "Seed."

    def test_reflection_drops_oldest_text(self) -> None:
        identity = IdentityState(self_model="abcdef")

        updated = identity.with_reflection("ghij", max_chars=5)

        assert updated.self_model == "fghij"

    def test_snapshot_record(self) -> None:
        snapshot = IdentitySnapshot(
            identity=IdentityState(self_model="s", value_ontology=("kinship",)),
            metrics=IVSMetrics(coherence=0.7),
        )

        restored = IdentitySnapshot.model_validate(snapshot.to_record())

        assert restored.identity.value_ontology == ("kinship",)
        assert restored.metrics.coherence == 0.7


class TestContextEntry:
    """Test cases for context window entries."""

    def test_from_thought(self) -> None:
        thought = Thought.from_partner("hi")

        entry = ContextEntry.from_thought(thought)

        assert entry.role == "partner"
        assert entry.content == "hi"
        assert entry.ts == thought.ts
