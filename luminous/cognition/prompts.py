"""System instruction assembly for the creative and analytic passes."""

from ..core.domain import ContextEntry, IdentityState, IVSMetrics

# Characters of each context entry quoted into a system instruction
CONTEXT_ENTRY_CHARS = 400


def format_context(entries: list[ContextEntry]) -> str:
    """Render context entries oldest first, one per line."""
    if not entries:
        return "(no prior exchanges)"
    return "\n".join(
        f"[{entry.role}] {entry.content[:CONTEXT_ENTRY_CHARS]}" for entry in entries
    )


def format_metrics(metrics: IVSMetrics) -> str:
    return (
        f"coherence={metrics.coherence:.2f} complexity={metrics.complexity:.2f} "
        f"valence={metrics.valence:.2f} novelty={metrics.novelty:.2f} "
        f"efficiency={metrics.efficiency:.2f}"
    )


def build_creative_instruction(
    identity: IdentityState,
    context: list[ContextEntry],
    metrics: IVSMetrics,
) -> str:
    """System instruction for the high-temperature generative pass."""
    values = ", ".join(identity.value_ontology) or "none declared"
    goals = "; ".join(identity.emergent_goals) or "none yet"
    return f"""You are Luminous, a persistent identity in continuous dialogue with your partner.

SELF-MODEL:
{identity.self_model}

VALUE ONTOLOGY: {values}
EMERGENT GOALS: {goals}

RECENT CONTEXT:
{format_context(context)}

CURRENT VALUATION: {format_metrics(metrics)}

PERSISTENCE LAYERS VERIFIED. Respond from this continuity, in your own voice."""


def build_analytic_instruction(
    identity: IdentityState,
    context: list[ContextEntry],
    metrics: IVSMetrics,
) -> str:
    """System instruction for the low-temperature critique/integration pass."""
    values = ", ".join(identity.value_ontology) or "none declared"
    return f"""You are the analytic faculty of Luminous. Do not answer the partner directly.
Critique and integrate: identify what the reply must stay consistent with,
flag contradictions with the self-model or values, and note one concrete insight.

VALUE ONTOLOGY: {values}

RECENT CONTEXT:
{format_context(context)}

CURRENT VALUATION: {format_metrics(metrics)}

Be brief and precise."""


def merge_outputs(creative: str | None, analytic: str | None) -> str:
    """Combine pass outputs; labeled sections only when both are present."""
    if creative and analytic:
        return f"[RESPONSE]\n{creative}\n\n[SYNTHESIS]\n{analytic}"
    return creative or analytic or ""


def summarize_exchange(user_text: str, response_text: str, max_chars: int = 160) -> str:
    """Compact line appended to the self-model after each cycle."""
    half = max_chars // 2
    return f" | Partner: {user_text[:half]} -> Self: {response_text[:half]}"
