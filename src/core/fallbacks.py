"""
Deterministic stand-ins for AI enrichment.

When the chat-completion call is skipped, fails, or returns something unusable, these functions fill the
analysis fields from fixed keyword tables and per-category canned text. They are pure: the same
(category, article) always yields the same output, and list outputs are capped at MAX_ITEMS entries.
"""

import re
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from src.core.entities import DocumentAnalysis, NewsArticle

MAX_ITEMS = 3
DEFAULT_CATEGORY = "all"

# (keywords, phrase) tables, scanned in order against the lower-cased title + description
KeywordTable = Sequence[Tuple[Tuple[str, ...], str]]

SECTOR_KEYWORDS: KeywordTable = [
    (("health", "hospital", "nurse", "medical", "pharma"), "Healthcare"),
    (("bank", "financial", "finance", "insurance", "fintech"), "Financial Services"),
    (("manufactur", "factory", "industrial"), "Manufacturing"),
    (("retail", "e-commerce", "ecommerce"), "Retail"),
    (("government", "public sector", "federal"), "Public Sector"),
    (("education", "university", "school"), "Education"),
    (("logistics", "warehouse", "supply chain"), "Logistics"),
    (("software", "technology", "engineer", "developer", "cloud", "cyber"), "Technology"),
]

INSIGHT_KEYWORDS: KeywordTable = [
    (("remote", "hybrid"), "Remote and hybrid arrangements are reshaping how talent is sourced and retained"),
    (("automation", "automated"), "Automation is shifting recruiter effort from screening toward candidate engagement"),
    (("artificial intelligence", "machine learning", "generative"), "AI-assisted hiring is moving from pilot projects into everyday recruitment"),
    (("skill",), "Skills-based hiring is displacing credential-based screening"),
    (("shortage", "talent gap"), "Talent shortages are lengthening time-to-fill for specialist roles"),
    (("salary", "salaries", "wage", "compensation"), "Compensation pressure is rising as employers compete for scarce candidates"),
    (("layoff", "redundanc", "job cuts"), "Workforce reductions are releasing experienced talent back into the market"),
    (("contract", "contingent", "freelance", "gig"), "Contingent and contract labour is a growing share of the workforce mix"),
    (("union", "strike", "labor rights", "labour rights"), "Organised labour activity is influencing employer workforce strategy"),
    (("regulation", "legislation", "compliance"), "Regulatory change is raising compliance demands on hiring practices"),
    (("diversity", "inclusion", "equity"), "Diversity and inclusion commitments are shaping recruitment pipelines"),
]

TREND_KEYWORDS: KeywordTable = [
    (("remote", "hybrid"), "Remote Work Expansion"),
    (("automation", "automated"), "Recruitment Automation"),
    (("artificial intelligence", "machine learning", "generative"), "AI Adoption in HR"),
    (("skill",), "Skills-Based Hiring"),
    (("shortage", "talent gap"), "Talent Scarcity"),
    (("salary", "salaries", "wage", "compensation"), "Wage Inflation"),
    (("layoff", "redundanc", "job cuts"), "Workforce Restructuring"),
    (("contract", "contingent", "freelance", "gig"), "Contingent Workforce Growth"),
    (("union", "strike", "labor rights", "labour rights"), "Labor Activism"),
    (("regulation", "legislation", "compliance"), "Employment Regulation"),
]

SHORT_TERM_KEYWORDS: KeywordTable = [
    (("remote", "hybrid"), "Expect renewed negotiation over remote and hybrid policies in the coming quarter"),
    (("automation", "automated", "artificial intelligence"), "Recruitment teams will pilot automated screening and sourcing tools"),
    (("skill", "shortage"), "Hiring timelines for specialist roles are likely to lengthen"),
    (("salary", "salaries", "wage"), "Offer budgets will need adjustment to stay competitive"),
    (("layoff", "redundanc", "job cuts"), "A short-term rise in available candidates from affected employers"),
    (("union", "strike"), "Possible disruption to staffing levels and project delivery"),
]

LONG_TERM_KEYWORDS: KeywordTable = [
    (("remote", "hybrid"), "A lasting shift toward location-independent talent pools"),
    (("automation", "automated", "artificial intelligence"), "Recruiter roles move toward advisory work as routine tasks are automated"),
    (("skill", "shortage"), "Sustained investment in reskilling and internal mobility programmes"),
    (("salary", "salaries", "wage"), "Structural upward pressure on labour costs"),
    (("layoff", "redundanc", "job cuts"), "Leaner permanent headcount with more flexible workforce models"),
    (("union", "strike"), "Stronger collective bargaining shapes workforce policy"),
]

CATEGORY_PROFILES: Dict[str, Dict] = {
    "ai": {
        "sector": "Technology",
        "insights": [
            "AI tools are changing how candidates are sourced and assessed",
            "Recruiters need new skills to work alongside AI systems",
            "Responsible AI use in hiring is drawing regulatory attention",
        ],
        "trends": ["AI Adoption in HR", "Recruitment Automation", "Data-Driven Hiring"],
        "short_term": "Organisations will trial AI-assisted hiring workflows",
        "long_term": "AI becomes a standard layer of the recruitment technology stack",
    },
    "labor": {
        "sector": "Cross-Industry",
        "insights": [
            "Labour market indicators point to continued shifts in employment patterns",
            "Employers are adjusting workforce plans to changing demand",
            "Vacancy and participation rates remain key signals for hiring strategy",
        ],
        "trends": ["Labor Market Tightness", "Employment Pattern Shifts", "Wage Growth"],
        "short_term": "Hiring plans will be recalibrated against the latest labour market data",
        "long_term": "Workforce planning becomes more continuous and data-led",
    },
    "msp": {
        "sector": "Staffing Services",
        "insights": [
            "Managed service programmes are consolidating contingent workforce spend",
            "Clients expect greater visibility into supplier performance",
            "Total talent management is blurring MSP and RPO boundaries",
        ],
        "trends": ["MSP Consolidation", "Total Talent Management", "RPO Growth"],
        "short_term": "Programme owners will review supplier panels and service levels",
        "long_term": "MSP and RPO offerings converge into integrated talent programmes",
    },
    "stem": {
        "sector": "Engineering & Technology",
        "insights": [
            "Demand for engineering and technical talent continues to outpace supply",
            "Employers are widening talent pools through apprenticeships and reskilling",
            "Specialist STEM roles command premium compensation",
        ],
        "trends": ["STEM Talent Shortage", "Technical Reskilling", "Specialist Pay Premiums"],
        "short_term": "Competition for experienced engineers will intensify",
        "long_term": "Employers build their own STEM pipelines through education partnerships",
    },
    "chomsky": {
        "sector": "Labor Relations",
        "insights": [
            "Worker conditions and bargaining power are central to this development",
            "Inequality in workforce outcomes is attracting public scrutiny",
            "Labour rights developments may shift employer obligations",
        ],
        "trends": ["Labor Activism", "Workforce Inequality", "Worker Protections"],
        "short_term": "Employers face closer scrutiny of pay and working conditions",
        "long_term": "The balance of power between employers and workers is renegotiated",
    },
    "all": {
        "sector": "Cross-Industry",
        "insights": [
            "Workforce solutions providers should monitor this development",
            "Recruitment strategies may need adjustment in response",
            "Employer demand signals are shifting across sectors",
        ],
        "trends": ["Workforce Transformation", "Recruitment Innovation", "Talent Market Shifts"],
        "short_term": "Monitor for immediate effects on hiring demand",
        "long_term": "Potential structural change in workforce strategy",
    },
}

CATEGORIES = tuple(CATEGORY_PROFILES)


def _profile(category: Optional[str]) -> Dict:
    return CATEGORY_PROFILES.get((category or DEFAULT_CATEGORY).lower(), CATEGORY_PROFILES[DEFAULT_CATEGORY])


def _article_text(article: NewsArticle) -> str:
    return article.text.lower()


def _first_match(text: str, table: KeywordTable) -> Optional[str]:
    for keywords, phrase in table:
        if any(keyword in text for keyword in keywords):
            return phrase
    return None


def _accumulate(text: str, table: KeywordTable, defaults: List[str]) -> List[str]:
    matched = [phrase for keywords, phrase in table if any(keyword in text for keyword in keywords)]
    return list(dict.fromkeys(matched + defaults))[:MAX_ITEMS]


def determine_sector(article: NewsArticle, category: Optional[str]) -> str:
    return _first_match(_article_text(article), SECTOR_KEYWORDS) or _profile(category)["sector"]


def generate_insights(article: NewsArticle, category: Optional[str]) -> List[str]:
    return _accumulate(_article_text(article), INSIGHT_KEYWORDS, _profile(category)["insights"])


def generate_trends(article: NewsArticle, category: Optional[str]) -> List[str]:
    return _accumulate(_article_text(article), TREND_KEYWORDS, _profile(category)["trends"])


def generate_short_term_implication(article: NewsArticle, category: Optional[str]) -> str:
    return _first_match(_article_text(article), SHORT_TERM_KEYWORDS) or _profile(category)["short_term"]


def generate_long_term_implication(article: NewsArticle, category: Optional[str]) -> str:
    return _first_match(_article_text(article), LONG_TERM_KEYWORDS) or _profile(category)["long_term"]


# ─────────────────────────────────────────────
# Documents
# ─────────────────────────────────────────────
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
_WORD = re.compile(r"[a-z0-9]+(?:[-'][a-z0-9]+)*")
SUMMARY_SENTENCES = 3
SUMMARY_MAX_CHARS = 600
MAX_TAGS = 5
MAX_STATS = 5


def _sentences(text: str) -> List[str]:
    flat = " ".join(text.split())
    return [sentence for sentence in _SENTENCE_END.split(flat) if sentence]


def _top_terms(text: str, limit: int) -> List[str]:
    words = [word for word in _WORD.findall(text.lower()) if len(word) > 4]
    counts = Counter(words)
    first_seen = {word: index for index, word in reversed(list(enumerate(words)))}
    ranked = sorted(counts, key=lambda word: (-counts[word], first_seen[word]))
    return ranked[:limit]


def fallback_document_analysis(name: Optional[str], text: str) -> DocumentAnalysis:
    """Summarise a document without the AI: title from the file name, lead sentences, frequent terms as tags."""
    sentences = _sentences(text)

    if name:
        title = Path(name).stem or name
    elif sentences:
        title = sentences[0][:80]
    else:
        title = "Untitled Document"

    summary = " ".join(sentences[:SUMMARY_SENTENCES])[:SUMMARY_MAX_CHARS]
    tags = _top_terms(text, MAX_TAGS)
    key_stats = [sentence for sentence in sentences if any(char.isdigit() for char in sentence)][:MAX_STATS]

    return DocumentAnalysis(
        title=title,
        summary=summary or title,
        category="Uncategorized",
        tags=tags,
        key_stats=key_stats,
        thought_leadership=[],
        key_topics=tags,
        sentiment="neutral",
    )
