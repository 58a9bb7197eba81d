from __future__ import annotations

from inbox_digest.categories import CategoryTag
from inbox_digest.config.settings import DigestConfig
from inbox_digest.models import ModelResult
from inbox_digest.pipeline.merge import HEURISTIC_FALLBACK
from inbox_digest.pipeline.orchestrator import classify_messages
from inbox_digest.rules.classification import HeuristicClassifier
from tests.fakes import make_message


class ScriptedModel:
    """Fails every batch whose index is in `fail`, answers Ads for the rest."""

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.batches = []

    def classify_batch(self, batch):
        index = len(self.batches)
        self.batches.append([e.message.message_id for e in batch])
        if index in self.fail:
            return None
        return {e.message.message_id: ModelResult(message_id=e.message.message_id, categories=("Ads",)) for e in batch}


def test_batches_are_sequential_and_fail_independently() -> None:
    messages = [make_message(f"m{i}", "notifications@linkedin.com", "Job Alert") for i in range(5)]
    model = ScriptedModel(fail={1})

    results = classify_messages(
        messages, HeuristicClassifier(DigestConfig()), model, batch_size=2
    )

    assert model.batches == [["m0", "m1"], ["m2", "m3"], ["m4"]]
    assert [r.message_id for r in results] == ["m0", "m1", "m2", "m3", "m4"]
    for r in results:
        if r.message_id in {"m2", "m3"}:
            assert r.reasons == (HEURISTIC_FALLBACK,)
            assert r.categories == {CategoryTag.JOBS_SITES}
        else:
            assert r.categories == {CategoryTag.ADS}
            assert r.site_name == "LinkedIn"


class ExplodingModel:
    def classify_batch(self, batch):
        raise RuntimeError("socket closed")


def test_classifier_exception_is_a_failed_batch() -> None:
    messages = [make_message("m0", "notifications@linkedin.com", "Job Alert")]

    [result] = classify_messages(messages, HeuristicClassifier(DigestConfig()), ExplodingModel(), batch_size=5)

    assert result.reasons == (HEURISTIC_FALLBACK,)
    assert result.categories == {CategoryTag.JOBS_SITES}
