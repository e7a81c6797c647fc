"""
Pre-configured usage scenarios based on real-world agent workloads.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Tuple

from .catalog import DEFAULT_CATALOG, PricingCatalog
from .usage import UsageRecord, sanitize_usage_record


@dataclass(frozen=True)
class ScenarioTemplate:
    """A named preset usage profile."""
    id: str
    name: str
    description: str
    category: str
    usage: Mapping[str, float]
    use_case: str
    monthly_requests: int
    session_duration: str
    key_features: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "usage", MappingProxyType(dict(self.usage)))

    def to_record(self, catalog: PricingCatalog = DEFAULT_CATALOG) -> UsageRecord:
        """Sanitized usage record for this scenario."""
        return sanitize_usage_record(self.usage, catalog)


SCENARIO_TEMPLATES: List[ScenarioTemplate] = [
    ScenarioTemplate(
        id="customer-support-agent",
        name="Customer Support Agent",
        description="AI agent handling customer queries with RAG and MCP tools",
        category="runtime",
        usage={
            # 10M sessions x 18s active CPU x 1 vCPU
            "runtime_cpu_hours": 50_000,
            # 10M sessions x 60s x 2GB
            "runtime_memory_gb_hours": 333_333,
        },
        use_case="Customer support agent resolving user queries across chat and email",
        monthly_requests=10_000_000,
        session_duration="60 seconds",
        key_features=(
            "RAG for product policies",
            "MCP tools for order status",
            "Multi-step reasoning",
            "Session isolation",
        ),
    ),
    ScenarioTemplate(
        id="travel-booking-system",
        name="Automated Travel Booking",
        description="AI agent automating trip planning through web interactions",
        category="browser",
        usage={
            # 100K sessions x 120s x 20% active x 2 vCPU
            "browser_tool_cpu_hours": 1_333,
            # 100K sessions x 600s x 4GB
            "browser_tool_memory_gb_hours": 66_667,
        },
        use_case="Travel booking AI agent automating full trip planning and booking",
        monthly_requests=100_000,
        session_duration="10 minutes",
        key_features=(
            "Headless browser automation",
            "Flight and hotel search",
            "Booking form submission",
        ),
    ),
    ScenarioTemplate(
        id="data-analysis-automation",
        name="Data Analysis Automation",
        description="Natural language data analysis with Python code execution",
        category="code-interpreter",
        usage={
            # 30K executions x 48s x 2 vCPU
            "code_interpreter_cpu_hours": 800,
            # 30K executions x 120s x 4GB
            "code_interpreter_memory_gb_hours": 4_000,
        },
        use_case="Data analyst agent supporting business teams with dataset queries and visualizations",
        monthly_requests=10_000,
        session_duration="2 minutes",
        key_features=(
            "Sandboxed Python execution",
            "Dataset queries",
            "Chart generation",
        ),
    ),
    ScenarioTemplate(
        id="hr-assistant-tools",
        name="HR Assistant with Internal Tools",
        description="HR assistant connecting to multiple internal systems via MCP",
        category="gateway",
        usage={
            "gateway_api_invocations": 200_000_000,
            "gateway_search_api_invocations": 50_000_000,
            "gateway_tool_indexing": 200,
        },
        use_case="HR assistant for mid-sized enterprise handling policy questions and system access",
        monthly_requests=50_000_000,
        session_duration="Variable per interaction",
        key_features=(
            "MCP tool integration",
            "Semantic tool search",
            "Internal system access",
        ),
    ),
    ScenarioTemplate(
        id="secure-support-access",
        name="Secure Customer Support Access",
        description="Customer support with secure delegated access to multiple tools",
        category="multi-service",
        usage={
            # 10K users x 5 sessions x 3 tools
            "identity_token_requests": 150_000,
        },
        use_case="Customer support agent with secure access to Slack, Zoom, and GitHub",
        monthly_requests=50_000,
        session_duration="Variable per interaction",
        key_features=(
            "OAuth token management",
            "Delegated tool access",
            "Per-user credentials",
        ),
    ),
    ScenarioTemplate(
        id="personalized-coding-assistant",
        name="Personalized Coding Assistant",
        description="Coding assistant with persistent memory across sessions",
        category="memory",
        usage={
            "memory_short_term_events": 100_000,
            "memory_long_term_storage_built_in": 10_000,
            "memory_long_term_storage_custom": 0,
            "memory_long_term_retrievals": 20_000,
        },
        use_case="Coding assistant helping software engineers with personalized experience",
        monthly_requests=100_000,
        session_duration="Variable per interaction",
        key_features=(
            "Short-term conversation memory",
            "Long-term user preferences",
            "Cross-session personalization",
        ),
    ),
]


def get_scenario_template(template_id: str) -> ScenarioTemplate:
    """Get a scenario template by id.

    Raises:
        ValueError: If no template has that id
    """
    for template in SCENARIO_TEMPLATES:
        if template.id == template_id:
            return template
    raise ValueError(f"Unknown scenario template: {template_id}")
