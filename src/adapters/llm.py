"""
This module serves as the adapter layer for the chat-completion API.
The Analyst sends a news article or a document to the model with a prompt that asks for a fixed JSON schema,
and hands back the raw message content. Turning that content into typed data (and deciding what to do when it
is unusable) is the job of src.core.decoding and the use cases, so this layer stays a thin, swappable wrapper.

The OpenAI client is built by the caller (see build_openai_client) and passed in, which lets tests hand in a fake.
"""

from typing import Optional

from openai import OpenAI, APIError

from src.core.config import Settings
from src.core.entities import NewsArticle

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="adapters.log")

SYSTEM_PROMPT = "You are an expert analyst specializing in workforce solutions and recruitment industry trends."

# prompt templates
ARTICLE_PROMPT = """Analyze this news article for a workforce solutions and recruitment audience.
Topic focus: {category}

Title: {title}
Description: {description}
Source: {source}

Respond with JSON only, using exactly this schema:
{{
  "impact": "High" | "Medium" | "Low",
  "sector": "string (the industry sector most affected)",
  "keyInsights": ["string", "string", "string"],
  "implications": {{
    "shortTerm": "string",
    "longTerm": "string"
  }},
  "relevanceScore": integer from 1 to 10,
  "workforceTrends": ["string", "string", "string"]
}}"""

DOCUMENT_PROMPT = """Analyze this document and provide a structured analysis. Include:
1. A title that captures the main topic
2. A brief executive summary (2-3 sentences)
3. The primary category it belongs to
4. Relevant tags (5-7 keywords)
5. The 5 most notable statistics from the document
6. 3 key thought leadership points
7. Key topics (max 5)
8. Overall sentiment (positive, neutral or negative)

Respond with JSON only, using exactly this schema:
{{
  "title": "string",
  "summary": "string",
  "category": "string",
  "tags": ["string"],
  "keyStats": ["string"],
  "thoughtLeadership": ["string"],
  "keyTopics": ["string"],
  "sentiment": "string"
}}

Document content:
{content}"""

# Keeps a single request inside typical context windows
MAX_DOCUMENT_CHARS = 12000

CATEGORY_LABELS = {
    "ai": "AI and automation in recruitment",
    "labor": "labor market and employment trends",
    "msp": "managed service providers and RPO",
    "stem": "STEM and technical talent",
    "chomsky": "worker conditions, labor rights and inequality",
    "all": "workforce solutions and recruitment in general",
}


def build_openai_client(settings: Settings) -> Optional[OpenAI]:
    """Returns None when no API key is configured; callers then rely on the fallback generators."""
    if not settings.ai_configured:
        logger.warning("⚠️ OPENAI_API_KEY not set, AI enrichment disabled")
        return None
    return OpenAI(base_url=settings.openai_base_url, api_key=settings.openai_api_key)


class Analyst:
    def __init__(self, client: OpenAI, model: str, temperature: float = 0.3, max_tokens: int = 1000):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["Analyst"]:
        client = build_openai_client(settings)
        if client is None:
            return None
        return cls(client, settings.openai_model, temperature=settings.openai_temperature)

    def _complete(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    def analyze_article(self, article: NewsArticle, category: str) -> str:
        """Ask for the article analysis JSON. Returns the raw content; raises APIError on transport failures."""
        prompt = ARTICLE_PROMPT.format(
            category=CATEGORY_LABELS.get(category, CATEGORY_LABELS["all"]),
            title=article.title,
            description=article.description,
            source=article.source,
        )
        try:
            content = self._complete(prompt)
        except APIError as e:
            logger.error(f"LLM API error analysing '{article.title[:60]}': {e}")
            raise
        logger.debug(f"analyze_article: '{article.title[:40]}...' -> {len(content)} chars")
        return content

    def analyze_document(self, content: str) -> str:
        """Ask for the document analysis JSON (title, summary, category, tags, stats, topics, sentiment)."""
        if len(content) > MAX_DOCUMENT_CHARS:
            logger.debug(f"✂️ Document truncated from {len(content)} to {MAX_DOCUMENT_CHARS} chars for analysis")
        prompt = DOCUMENT_PROMPT.format(content=content[:MAX_DOCUMENT_CHARS])
        try:
            result = self._complete(prompt)
        except APIError as e:
            logger.error(f"LLM API error analysing document: {e}")
            raise
        logger.debug(f"analyze_document: {len(content)} chars in -> {len(result)} chars out")
        return result
