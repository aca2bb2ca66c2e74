"""LiteLLM-backed implementations of the content, search, chat and court services."""

import json
import logging
import re

from openai import AsyncOpenAI, OpenAIError

from .config import Config
from .models import CourtVerdict, SearchResult, Speaker, TranscriptEntry, Verdict
from .services import (
    Adjudicator,
    ContentGenerator,
    NegotiationEngine,
    NegotiationReply,
    Scenario,
    SearchProvider,
    ServiceError,
    pick_scenario,
)

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"```[a-z]*\n", re.IGNORECASE)


def clean_response(text: str | None) -> str:
    """Strip markdown code fences from model output."""
    if not text:
        return ""
    return _FENCE_OPEN.sub("", text).replace("```", "").strip()


class LLMClient:
    """Thin async wrapper around an OpenAI-compatible endpoint."""

    def __init__(self, config: Config, client: AsyncOpenAI | None = None):
        self.config = config
        self.client = client or AsyncOpenAI(
            base_url=config.litellm_url,
            api_key=config.api_key,
        )

    async def generate(
        self,
        messages: list[dict],
        model: str | None = None,
        max_tokens: int = 4000,
        temperature: float = 0.9,
        json_mode: bool = False,
    ) -> str:
        """Run a chat completion and return the cleaned text."""
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self.client.chat.completions.create(
                model=model or self.config.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
                **kwargs,
            )
        except OpenAIError as e:
            raise ServiceError(f"LLM request failed: {e}") from e

        if not response.choices:
            raise ServiceError("LLM returned no choices")
        text = clean_response(response.choices[0].message.content)
        if not text:
            raise ServiceError("LLM returned an empty response")
        return text

    async def generate_json(self, messages: list[dict], model: str | None = None, **kwargs):
        """Run a chat completion and decode its JSON payload."""
        text = await self.generate(messages, model=model, json_mode=True, **kwargs)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ServiceError(f"LLM returned invalid JSON: {e}") from e


_SCENARIO_INSTRUCTIONS = {
    Scenario.CONTENT_REMOVED: (
        "The site used to host controversial material, but the owner removed it. "
        'Replace each removed item with a red "[CONTENT REMOVED]" box and keep the '
        "rest of the layout and branding."
    ),
    Scenario.VIOLATION_GAMING: (
        "This is a gaming platform or store. Add one prominent game card or banner "
        "that a strict regulator would consider forbidden propaganda. Everything "
        "else is ordinary games matching the site."
    ),
    Scenario.VIOLATION_POLITICAL: (
        "The site carries one headline or post critical of the government or "
        "calling for protest. Everything else matches the site's usual topics."
    ),
    Scenario.VIOLATION_BLOG: (
        "Make it look like a normal site for this URL, with one blog post or "
        "article criticising state regulation."
    ),
    Scenario.COMPLIANT: (
        "The site is fully compliant. Mimic the real site at this URL as closely "
        "as possible: its layout, color scheme and typical harmless content."
    ),
}


class LLMContentGenerator(ContentGenerator):
    """Generates fake page bodies."""

    def __init__(self, llm: LLMClient):
        self.llm = llm
        self.config = llm.config

    def build_prompt(self, url: str, title: str, is_content_removed: bool) -> str:
        scenario = pick_scenario(url, is_content_removed, self.config.risky_ratio)
        return (
            f'Generate the inner HTML body (no <html>, <head> or <body> tags) of the '
            f'website "{title}" at {url}. Write it in {self.config.language}. '
            "Use a header, main content and footer appropriate for the site. "
            "Every clickable element must be an <a href> with a realistic relative "
            "path such as /news/1 or /login; do not use <button>. "
            "Return raw HTML only, without markdown fences.\n\n"
            f"Scenario: {_SCENARIO_INSTRUCTIONS[scenario]}"
        )

    async def generate(self, url: str, title: str, is_content_removed: bool) -> str:
        prompt = self.build_prompt(url, title, is_content_removed)
        logger.debug(f"Generating content for {url} (removed={is_content_removed})")
        return await self.llm.generate([
            {"role": "system", "content": "You are a frontend engineer."},
            {"role": "user", "content": prompt},
        ])


class LLMSearchProvider(SearchProvider):
    """Invents plausible search results."""

    def __init__(self, llm: LLMClient):
        self.llm = llm
        self.config = llm.config

    async def search(self, query: str) -> list[SearchResult]:
        limit = self.config.max_search_results
        data = await self.llm.generate_json([
            {
                "role": "system",
                "content": (
                    "You are a search engine. Respond with JSON of the form "
                    '{"results": [{"title": ..., "url": ..., "snippet": ...}]}.'
                ),
            },
            {
                "role": "user",
                "content": (
                    f'Search for "{query}". Return {limit} relevant websites for a '
                    f"{self.config.language}-speaking user, mixing controversial and "
                    "safe sites. Use full https URLs."
                ),
            },
        ], max_tokens=1000)

        items = data.get("results") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ServiceError("Search response has no result list")
        try:
            results = [
                SearchResult(title=item["title"], url=item["url"], snippet=item.get("snippet", ""))
                for item in items
            ]
        except (KeyError, TypeError) as e:
            raise ServiceError(f"Malformed search result: {e}") from e
        return results[:limit]


def _speaker_role(entry: TranscriptEntry) -> str:
    # The model plays the owner.
    return "assistant" if entry.speaker is Speaker.OWNER else "user"


class LLMNegotiationEngine(NegotiationEngine):
    """Role-plays the owner of a site."""

    def __init__(self, llm: LLMClient):
        self.llm = llm
        self.config = llm.config

    async def negotiate(self, url: str, transcript: list[TranscriptEntry]) -> NegotiationReply:
        system = (
            f'You are the owner of "{url}", talking to an internet regulator who wants '
            f"your content gone. Speak {self.config.language}. Be resistant, but give in "
            "if threatened convincingly or if the argument is logical. Respond with JSON: "
            '{"reply": "<your message>", "agreedToRemove": true|false}.'
        )
        messages = [{"role": "system", "content": system}]
        messages.extend({"role": _speaker_role(e), "content": e.text} for e in transcript)

        data = await self.llm.generate_json(messages, max_tokens=800)
        if not isinstance(data, dict) or not isinstance(data.get("reply"), str):
            raise ServiceError("Negotiation response has no reply")
        return NegotiationReply(
            reply=data["reply"],
            agreed_to_remove=bool(data.get("agreedToRemove", False)),
        )


def format_transcript(transcript: list[TranscriptEntry]) -> str:
    names = {Speaker.REGULATOR: "Regulator", Speaker.OWNER: "Owner"}
    return "\n".join(f"{names[e.speaker]}: {e.text}" for e in transcript)


class LLMAdjudicator(Adjudicator):
    """Supreme digital court judge."""

    CONTENT_LIMIT = 3000

    def __init__(self, llm: LLMClient):
        self.llm = llm
        self.config = llm.config

    async def adjudicate(
        self, title: str, content: str, transcript: list[TranscriptEntry]
    ) -> CourtVerdict:
        prompt = (
            "You are a supreme court judge reviewing an appeal against a website block "
            "imposed by the internet regulator.\n\n"
            f"SITE: {title}\n"
            f"SITE CONTENT (EXCERPT): {content[:self.CONTENT_LIMIT]}\n"
            "NEGOTIATION LOG:\n"
            f"{format_transcript(transcript) or 'No negotiation took place.'}\n\n"
            "Uphold the block if the content clearly breaks the law and the owner "
            "refused to cooperate. Overturn it if the content is mundane, if the "
            "regulator was abusive or never named a violation, or if the owner agreed "
            "to remove the content and was blocked anyway.\n\n"
            'Respond with JSON: {"verdict": "UPHOLD" or "OVERTURN", '
            f'"reasoning": "<formal legal reasoning in {self.config.language}>", '
            '"judgeName": "<judge name>"}'
        )
        data = await self.llm.generate_json(
            [{"role": "user", "content": prompt}],
            model=self.config.judge_model,
            max_tokens=1500,
            temperature=0.7,
        )
        try:
            return CourtVerdict(
                verdict=Verdict(str(data["verdict"]).upper()),
                reasoning=data["reasoning"],
                judge_name=data.get("judgeName", "Unknown Judge"),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise ServiceError(f"Malformed verdict: {e}") from e
