"""
Static routing data shipped with routeopt.

These literals are the hand-authored inputs of the optimizer: which SOUL.md
phrases identify a task type, how well each model suits each task type
(1-10), which models are preferred or pinned per task, and the display
labels used when writing model names back into the document.

Nothing in here should be imported directly by the engine or the parser;
they receive a RoutingTables instance built from this data instead.
"""

# Phrase (as written in SOUL.md) -> canonical task type id
TASK_PHRASES: dict[str, str] = {
    # Daily Conversation
    "Casual chat, greetings, jokes": "casual-chat",
    "Simple Q&A (one-line answers)": "simple-qa",
    # Action Tasks
    "Browser operations": "browser-operations",
    "Exec commands": "exec-commands",
    "File operations": "file-operations",
    "Web search/fetch": "web-search-fetch",
    "Process management": "process-management",
    "GitHub CLI": "github-cli",
    "Multi-step planning": "multi-step-planning",
    "Requirements engineering": "requirements-engineering",
    "Calendar/email checking": "calendar-email-checking",
    "Research and synthesis": "research-synthesis",
    "Complex problem-solving": "complex-problem-solving",
    "Analysis and breakdowns": "analysis-breakdowns",
    # Escalation
    "Code changes": "code-changes",
    "Debugging": "debugging",
    "Formatting": "formatting",
    "Summaries": "summaries",
    "cheap/simple edits use": "file-edits-cheap",
    "higher risk edits use": "file-edits-high-risk",
}

# Task type -> model id -> quality score (1-10)
QUALITY_SCORES: dict[str, dict[str, int]] = {
    "casual-chat": {
        "deepseek/deepseek-chat": 9,
        "deepseek/deepseek-reasoner": 8,
        "google/gemini-flash-lite": 6,
        "google/gemini-3-flash-preview": 7,
        "claude-haiku-4-5-20251001": 8,
    },
    "simple-qa": {
        "deepseek/deepseek-chat": 8,
        "deepseek/deepseek-reasoner": 9,
        "google/gemini-flash-lite": 5,
        "google/gemini-3-flash-preview": 7,
        "claude-haiku-4-5-20251001": 8,
    },
    "browser-operations": {
        "google/gemini-3-flash-preview": 9,
        "google/gemini-2.5-flash": 8,
        "deepseek/deepseek-reasoner": 7,
        "claude-haiku-4-5-20251001": 6,
    },
    "exec-commands": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-reasoner": 8,
        "google/gemini-3-flash-preview": 6,
        "claude-sonnet-4-6": 10,
    },
    "file-operations": {
        "google/gemini-2.5-flash": 9,
        "google/gemini-flash-lite": 8,
        "deepseek/deepseek-chat": 6,
        "claude-haiku-4-5-20251001": 7,
    },
    "web-search-fetch": {
        "google/gemini-3-flash-preview": 9,
        "google/gemini-2.5-flash": 8,
        "deepseek/deepseek-reasoner": 7,
        "claude-haiku-4-5-20251001": 6,
    },
    "process-management": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-reasoner": 8,
        "google/gemini-3-flash-preview": 6,
    },
    "github-cli": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-reasoner": 8,
        "google/gemini-3-flash-preview": 5,
    },
    "multi-step-planning": {
        "deepseek/deepseek-reasoner": 9,
        "claude-haiku-4-5-20251001": 8,
        "claude-sonnet-4-6": 10,
        "google/gemini-3-pro-preview": 7,
    },
    "requirements-engineering": {
        "deepseek/deepseek-reasoner": 9,
        "claude-haiku-4-5-20251001": 8,
        "claude-sonnet-4-6": 10,
        "google/gemini-2.5-pro": 7,
    },
    "calendar-email-checking": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-reasoner": 8,
        "google/gemini-3-flash-preview": 7,
    },
    "research-synthesis": {
        "google/gemini-3-flash-preview": 9,
        "google/gemini-2.5-pro": 8,
        "deepseek/deepseek-reasoner": 7,
        "claude-haiku-4-5-20251001": 6,
    },
    "complex-problem-solving": {
        "deepseek/deepseek-reasoner": 9,
        "claude-haiku-4-5-20251001": 8,
        "claude-sonnet-4-6": 10,
        "google/gemini-3-pro-preview": 7,
    },
    "analysis-breakdowns": {
        "deepseek/deepseek-reasoner": 9,
        "claude-haiku-4-5-20251001": 8,
        "claude-sonnet-4-6": 10,
        "google/gemini-2.5-pro": 7,
    },
    "code-changes": {
        "claude-haiku-4-5-20251001": 8,
        "claude-sonnet-4-6": 10,
        "deepseek/deepseek-reasoner": 7,
        "claude-opus-4-6": 9,
    },
    "debugging": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-reasoner": 8,
        "claude-sonnet-4-6": 10,
    },
    "formatting": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-chat": 7,
        "google/gemini-2.5-flash": 8,
    },
    "summaries": {
        "google/gemini-3-flash-preview": 9,
        "google/gemini-2.5-pro": 8,
        "deepseek/deepseek-chat": 7,
        "claude-haiku-4-5-20251001": 6,
    },
    "file-edits-cheap": {
        "google/gemini-2.5-flash": 9,
        "google/gemini-flash-lite": 8,
        "deepseek/deepseek-chat": 6,
    },
    "file-edits-high-risk": {
        "claude-haiku-4-5-20251001": 9,
        "deepseek/deepseek-reasoner": 8,
        "claude-sonnet-4-6": 10,
    },
}

# Models that earn the preference bonus for a task type
TASK_PREFERENCES: dict[str, list[str]] = {
    "casual-chat": ["deepseek/deepseek-chat"],
    "simple-qa": ["deepseek/deepseek-chat"],
    "browser-operations": ["google/gemini-3-flash-preview"],
    "file-operations": ["google/gemini-2.5-flash"],
    "web-search-fetch": ["google/gemini-3-flash-preview"],
    "research-synthesis": ["google/gemini-3-flash-preview"],
    "summaries": ["google/gemini-3-flash-preview"],
    "file-edits-cheap": ["google/gemini-2.5-flash"],
    "exec-commands": ["claude-haiku-4-5-20251001"],
    "github-cli": ["claude-haiku-4-5-20251001"],
    "debugging": ["claude-haiku-4-5-20251001"],
}

# Hard overrides: the pinned model wins whenever it is priced
PINNED_MODELS: dict[str, str] = {
    "code-changes": "claude-sonnet-4-6",
    "file-edits-high-risk": "claude-haiku-4-5-20251001",
}

# Conservative allow-list used unless configuration widens it
DEFAULT_ALLOWED_MODELS: list[str] = [
    "deepseek/deepseek-chat",
    "deepseek/deepseek-reasoner",
    "google/gemini-flash-lite",
    "google/gemini-3-flash-preview",
    "google/gemini-2.5-flash",
    "google/gemini-3-pro-preview",
    "google/gemini-2.5-pro",
    "claude-haiku-4-5-20251001",
    "claude-sonnet-4-6",
    "claude-opus-4-6",
]

# Task types whose candidates must accept image input
VISION_TASKS: list[str] = [
    "browser-operations",
]

# Model id -> label as written in SOUL.md
MODEL_LABELS: dict[str, str] = {
    "deepseek/deepseek-chat": "DeepSeek Chat",
    "deepseek/deepseek-reasoner": "DeepSeek Reasoner",
    "google/gemini-flash-lite": "Gemini Flash Lite",
    "google/gemini-3-flash-preview": "Gemini 3 Flash",
    "google/gemini-2.5-flash": "Gemini 2.5 Flash",
    "google/gemini-3-pro-preview": "Gemini 3 Pro",
    "google/gemini-2.5-pro": "Gemini 2.5 Pro",
    "claude-haiku-4-5-20251001": "Claude Haiku",
    "claude-sonnet-4-6": "Claude Sonnet",
    "claude-opus-4-6": "Claude Opus",
}

# Share of monthly traffic per task type, used for savings estimates
DEFAULT_USAGE_MIX: dict[str, float] = {
    "casual-chat": 0.15,
    "simple-qa": 0.10,
    "browser-operations": 0.08,
    "exec-commands": 0.07,
    "file-operations": 0.06,
    "web-search-fetch": 0.08,
    "process-management": 0.05,
    "github-cli": 0.04,
    "multi-step-planning": 0.06,
    "requirements-engineering": 0.05,
    "calendar-email-checking": 0.04,
    "research-synthesis": 0.07,
    "complex-problem-solving": 0.05,
    "analysis-breakdowns": 0.05,
}
