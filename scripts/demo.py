#!/usr/bin/env python3
"""
Demo script for the answer cache.

Runs the assistant with in-memory stores and a canned upstream model, so the
only external service needed is Ollama for embeddings
(`ollama pull embeddinggemma && ollama serve`).
"""

import asyncio
import time
from collections.abc import AsyncIterator, Sequence

from answer_cache.entities import ChatTurn, Identity, TenantSettings
from answer_cache.errors import AssistantError
from answer_cache.repositories import (
    InMemoryCacheRepository,
    InMemoryConsumptionLogger,
    InMemoryRateLimitRepository,
    OllamaEmbeddingProvider,
)
from answer_cache.services import AssistantService

CANNED_ANSWERS = {
    "fé": (
        "Fé é a certeza daquilo que esperamos e a prova das coisas que não vemos "
        "(Hebreus 11:1). É confiar em Deus mesmo sem ver o resultado."
    ),
    "oração": (
        "Jesus ensinou a orar em secreto e com sinceridade (Mateus 6:5-13), "
        "apresentando a Deus gratidão, pedidos e confissão."
    ),
}


class CannedStream:
    def __init__(self, answer: str) -> None:
        self._answer = answer

    async def _words(self) -> AsyncIterator[str]:
        for i, word in enumerate(self._answer.split(" ")):
            await asyncio.sleep(0.03)
            yield word if i == 0 else " " + word

    def __aiter__(self) -> AsyncIterator[str]:
        return self._words()

    async def aclose(self) -> None:
        pass


class CannedCompletions:
    """Stands in for the upstream model; counts how often it is called."""

    model = "canned-demo"

    def __init__(self) -> None:
        self.calls = 0

    async def open(self, turns: Sequence[ChatTurn]) -> CannedStream:
        self.calls += 1
        question = turns[-1].content.lower()
        topic = next((key for key in CANNED_ANSWERS if key in question), None)
        return CannedStream(CANNED_ANSWERS.get(topic, "Não sei responder isso ainda."))


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def ask(service: AssistantService, identity: Identity, question: str) -> None:
    start = time.time()
    try:
        stream = await service.answer([ChatTurn("user", question)], identity)
    except AssistantError as e:
        print(f"\n  Q: {question}")
        print(f"  ✗ {e.kind} ({e.status_code}): {e.message}")
        return

    answer = await stream.text()
    duration = (time.time() - start) * 1000
    print(f"\n  Q: {question}")
    print(f"  source={stream.source}  remaining={stream.quota.remaining}  time={duration:.0f}ms")
    print(f"  A: {answer[:90]}{'...' if len(answer) > 90 else ''}")


async def demo_cache_tiers(service: AssistantService, completions: CannedCompletions) -> None:
    print_section("Exact, semantic and live answers")

    identity = Identity(user_id="maria", tenant_id="igreja-central")
    for question in [
        "O que é fé?",
        "o que é FÉ",
        "O que significa ter fé?",
        "Como devo fazer uma oração?",
        "Quem foi Melquisedeque?",
    ]:
        await ask(service, identity, question)
        await service.drain()

    print(f"\n  Upstream calls: {completions.calls}")


async def demo_limits(service: AssistantService) -> None:
    print_section("Quota and disabled tenants")

    limited = Identity("joao", "igreja-central", TenantSettings(daily_limit=1))
    await ask(service, limited, "O que é fé?")
    await ask(service, limited, "O que é fé?")

    disabled = Identity("ana", "igreja-norte", TenantSettings(assistant_enabled=False))
    await ask(service, disabled, "O que é fé?")


async def main() -> None:
    """Run all demos."""
    print("\n🚀 Answer Cache Demo")
    print("=" * 70)

    embeddings = OllamaEmbeddingProvider.create()
    if not await embeddings.is_available():
        print("\n❌ Ollama is not reachable.")
        print("\nStart it and pull the model:")
        print("  ollama pull embeddinggemma && ollama serve")
        return

    completions = CannedCompletions()
    consumption = InMemoryConsumptionLogger()
    service = AssistantService(
        store=InMemoryCacheRepository(),
        rate_limit_store=InMemoryRateLimitRepository(),
        embedding_provider=embeddings,
        completion_provider=completions,
        consumption_logger=consumption,
        cache_enabled=True,
        default_daily_limit=20,
    )

    try:
        await demo_cache_tiers(service, completions)
        await demo_limits(service)
        await service.drain()

        print_section("Metering")
        for record in consumption.records:
            print(f"  {record.user_id:<8} {record.source:<9} tokens≈{record.token_estimate}")

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)
    finally:
        await embeddings.close()


if __name__ == "__main__":
    asyncio.run(main())
