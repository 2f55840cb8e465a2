"""
Shared fixtures: a scripted model provider and sample agent outputs
"""

import copy
import itertools
import re
from types import SimpleNamespace
from typing import Optional

import pytest
from supabase import PostgrestAPIError

from content_brain.agents import AgentInvoker
from content_brain.controller import WorkflowController
from content_brain.models import (
    ArticleOutput,
    EditedArticleOutput,
    EditedLinkedInOutput,
    EditedSocialOutput,
    LinkedInOutput,
    MarketingBrief,
    ResearchDossier,
    SocialOutput,
    ThemesOutput,
)
from content_brain.search import SearchResult
from content_brain.stores import InMemoryPromptStore, SupabaseDB

COUNT_PATTERN = re.compile(r"(?:Write exactly|Edit these) (\d+)")

CAMPAIGN_INPUT = {
    "businessContext": "Accounts-payable automation for mid-market finance teams",
    "targetAudience": "CFOs at companies with 200-2000 employees",
    "marketingGoals": "Book qualified demos",
    "articlesCount": 1,
    "linkedinPostsCount": 2,
    "socialPostsCount": 3,
    "ctaType": "contact_us",
    "ctaUrl": "https://example.com/contact",
}


def make_brief() -> dict:
    return {
        "executive_summary": "Position AP automation as the fastest path to a modern finance team.",
        "target_persona": {
            "demographic": "CFOs, 40-60",
            "psychographic": "Risk-aware, efficiency-driven",
            "pain_points": ["Manual invoice entry", "Late payment penalties"],
            "motivations": ["Close the books faster"],
        },
        "campaign_objectives": ["50 demo requests in Q3"],
        "key_messages": ["Cut invoice processing time by 80%", "Never miss an early-payment discount"],
        "content_strategy": {"articles": 1, "linkedin_posts": 2, "social_posts": 3},
        "call_to_action": {"type": "contact_us", "message": "Talk to our team", "url": "https://example.com/contact"},
    }


def make_themes(label: str = "Theme") -> dict:
    return {
        "themes": [
            {
                "id": "",
                "title": f"{label} {i}",
                "description": f"Description of {label} {i}",
                "why_it_works": ["Timely", "Evidence-backed", "Relevant"],
                "detailed_description": f"Research brief for {label} {i}",
            }
            for i in range(1, 4)
        ],
        "search_summary": "Whitepaper shows strong ROI data",
    }


def make_dossier() -> dict:
    return {
        "key_findings": [
            {"claim": f"Finding {i}", "evidence": f"Evidence {i}", "confidence": "high"}
            for i in range(1, 7)
        ],
        "suggested_concepts": [
            {
                "title": f"Concept {i}",
                "angle": "Cost of delay",
                "why_it_works": "Quantifies pain",
                "key_evidence": ["E1", "E2", "E3"],
                "content_direction": "Lead with the numbers",
            }
            for i in range(1, 4)
        ],
        "research_summary": "Findings support all three concepts",
    }


def make_article(i: int = 1) -> dict:
    return {
        "headline": f"Headline {i}",
        "subheadline": f"Subheadline {i}",
        "body": f"Body of article {i}",
        "word_count": 1000,
        "key_takeaways": ["One", "Two", "Three"],
        "seo_keywords": ["ap automation", "finance", "invoices"],
        "call_to_action": "Talk to our team",
        "concept_used": "Concept 1",
    }


def make_linkedin_post(i: int = 1) -> dict:
    return {
        "hook": f"Hook {i}",
        "body": f"LinkedIn body {i}",
        "call_to_action": "Talk to our team",
        "character_count": 800,
        "concept_used": "Concept 2",
    }


def make_social_post(i: int = 1) -> dict:
    return {
        "platform": ["twitter", "facebook", "instagram"][(i - 1) % 3],
        "content": f"Social post {i}",
        "character_count": 120,
        "visual_suggestion": "Chart of processing times",
        "concept_used": "Concept 3",
    }


def requested_count(user_prompt: str) -> int:
    match = COUNT_PATTERN.search(user_prompt)
    return int(match.group(1)) if match else 1


def draft(items_field: str, make_item):
    def respond(user_prompt: str) -> dict:
        return {
            items_field: [make_item(i) for i in range(1, requested_count(user_prompt) + 1)],
            "generation_strategy": "One concept per piece",
            "whitepaper_utilization": "Cited key findings",
        }
    return respond


def edited(items_field: str, make_item, quality_score: float):
    def respond(user_prompt: str) -> dict:
        return {
            items_field: [make_item(i) for i in range(1, requested_count(user_prompt) + 1)],
            "editing_notes": "Tightened copy",
            "quality_score": quality_score,
        }
    return respond


class FakeModelProvider:
    """
    Scripted model provider keyed by output schema.

    A response may be a dict, a callable taking the user prompt, or an
    exception instance to raise.
    """

    def __init__(self, responses: Optional[dict] = None):
        rounds = itertools.count(1)
        self.responses = {
            MarketingBrief: make_brief(),
            ThemesOutput: lambda user_prompt: make_themes(f"Round {next(rounds)} theme"),
            ResearchDossier: make_dossier(),
            ArticleOutput: draft("articles", make_article),
            LinkedInOutput: draft("posts", make_linkedin_post),
            SocialOutput: draft("posts", make_social_post),
            EditedArticleOutput: edited("articles", make_article, 8.5),
            EditedLinkedInOutput: edited("posts", make_linkedin_post, 8),
            EditedSocialOutput: edited("posts", make_social_post, 7.5),
        }
        self.responses.update(responses or {})
        self.calls = []

    async def complete(self, model_name, system_prompt, user_prompt, output_schema):
        self.calls.append({
            "model_name": model_name,
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "schema": output_schema,
        })
        response = self.responses[output_schema]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response(user_prompt)
        return copy.deepcopy(response)

    def schemas_called(self) -> list:
        return [call["schema"] for call in self.calls]


class FakeWhitepaperSearch:
    """In-memory whitepaper search returning canned chunks for every query"""

    def __init__(self, results: Optional[list[SearchResult]] = None, fail_on: Optional[str] = None):
        self.results = results if results is not None else [
            SearchResult(id="chunk-1", text="Automation cut processing time by 80%", score=0.91, category="roi"),
            SearchResult(id="chunk-2", text="Late payments cost 2% of spend", score=0.84, category="risk"),
        ]
        self.fail_on = fail_on
        self.queries = []

    def search(self, whitepaper_id, query, top_k=5):
        self.queries.append((whitepaper_id, query))
        if self.fail_on and self.fail_on in query:
            raise RuntimeError("search backend unavailable")
        return self.results[:top_k]


@pytest.fixture
def campaign_input() -> dict:
    return dict(CAMPAIGN_INPUT)


@pytest.fixture
def provider() -> FakeModelProvider:
    return FakeModelProvider()


@pytest.fixture
def prompt_store() -> InMemoryPromptStore:
    return InMemoryPromptStore()


@pytest.fixture
def invoker(prompt_store, provider) -> AgentInvoker:
    return AgentInvoker(prompt_store, provider)


@pytest.fixture
def controller(invoker) -> WorkflowController:
    return WorkflowController(invoker)


class FakeQuery:
    """Chainable stand-in for the Supabase table query builder"""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.ordering = None
        self.window = None
        self.with_count = False

    def select(self, columns="*", count=None):
        self.columns = columns
        self.with_count = count == "exact"
        return self

    def insert(self, rows):
        self.operation, self.payload = "insert", rows
        return self

    def update(self, values):
        self.operation, self.payload = "update", values
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self.filters.append(lambda row: needle in str(row.get(column, "")).lower())
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def range(self, start, end):
        self.window = (start, end + 1)
        return self

    def limit(self, size):
        self.window = (0, size)
        return self

    def _matching(self) -> list[dict]:
        return [row for row in self.client.tables.setdefault(self.table, []) if all(f(row) for f in self.filters)]

    def _project(self, row: dict) -> dict:
        if self.columns == "*":
            return copy.deepcopy(row)
        return {column: copy.deepcopy(row.get(column)) for column in self.columns.split(",")}

    async def execute(self):
        self.client.executed.append((self.operation, self.table))
        if (self.operation, self.table) in self.client.failures:
            raise PostgrestAPIError({"message": f"{self.operation} on {self.table} failed", "code": "500"})

        rows = self.client.tables.setdefault(self.table, [])
        if self.operation == "insert":
            inserted = []
            for row in self.payload if isinstance(self.payload, list) else [self.payload]:
                row = {"id": str(next(self.client.ids)), **copy.deepcopy(row)}
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return SimpleNamespace(data=inserted, count=None)

        matching = self._matching()
        if self.operation == "update":
            for row in matching:
                row.update(copy.deepcopy(self.payload))
            return SimpleNamespace(data=copy.deepcopy(matching), count=None)
        if self.operation == "delete":
            self.client.tables[self.table] = [row for row in rows if row not in matching]
            return SimpleNamespace(data=copy.deepcopy(matching), count=None)

        if self.ordering:
            column, desc = self.ordering
            matching.sort(key=lambda row: row.get(column), reverse=desc)
        total = len(matching)
        if self.window:
            matching = matching[self.window[0]:self.window[1]]
        return SimpleNamespace(
            data=[self._project(row) for row in matching],
            count=total if self.with_count else None,
        )


class FakeSupabaseClient:
    """
    In-memory Supabase client supporting the query builder calls the stores make.

    ``failures`` holds (operation, table) pairs that raise a Postgrest error.
    """

    def __init__(self, tables: Optional[dict] = None, failures: Optional[set] = None):
        self.tables = copy.deepcopy(tables or {})
        self.failures = failures or set()
        self.executed = []
        self.ids = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def supabase_db(supabase_client) -> SupabaseDB:
    return SupabaseDB(client=supabase_client)
