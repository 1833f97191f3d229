from __future__ import annotations

import pytest

from src.core import fallbacks
from src.core.entities import NewsArticle


def _article(title: str, description: str = "") -> NewsArticle:
    return NewsArticle(title=title, description=description or title, url="https://example.com")


@pytest.mark.parametrize("category", list(fallbacks.CATEGORIES) + ["unknown", ""])
def test_generators_return_at_most_three_entries(category: str) -> None:
    article = _article(
        "Remote automation skill shortage",
        "Salary pressure, layoffs, contract work, union strikes, regulation and diversity all in one story",
    )
    assert 0 < len(fallbacks.generate_insights(article, category)) <= fallbacks.MAX_ITEMS
    assert 0 < len(fallbacks.generate_trends(article, category)) <= fallbacks.MAX_ITEMS


def test_generators_are_pure() -> None:
    article = _article("Hospitals automate remote scheduling", "Nurse shortage meets automation")
    first = (
        fallbacks.determine_sector(article, "ai"),
        fallbacks.generate_insights(article, "ai"),
        fallbacks.generate_trends(article, "ai"),
        fallbacks.generate_short_term_implication(article, "ai"),
        fallbacks.generate_long_term_implication(article, "ai"),
    )
    second = (
        fallbacks.determine_sector(article, "ai"),
        fallbacks.generate_insights(article, "ai"),
        fallbacks.generate_trends(article, "ai"),
        fallbacks.generate_short_term_implication(article, "ai"),
        fallbacks.generate_long_term_implication(article, "ai"),
    )
    assert first == second


def test_keyword_insights_come_before_category_defaults() -> None:
    article = _article("Remote hiring grows", "Companies expand remote teams")
    insights = fallbacks.generate_insights(article, "msp")
    assert insights[0] == "Remote and hybrid arrangements are reshaping how talent is sourced and retained"
    assert insights[1:] == fallbacks.CATEGORY_PROFILES["msp"]["insights"][:2]


def test_no_keyword_match_uses_category_profile() -> None:
    article = _article("Quarterly update", "Nothing notable happened")
    profile = fallbacks.CATEGORY_PROFILES["stem"]
    assert fallbacks.generate_insights(article, "stem") == profile["insights"]
    assert fallbacks.generate_trends(article, "stem") == profile["trends"]
    assert fallbacks.determine_sector(article, "stem") == profile["sector"]
    assert fallbacks.generate_short_term_implication(article, "stem") == profile["short_term"]
    assert fallbacks.generate_long_term_implication(article, "stem") == profile["long_term"]


def test_unknown_category_behaves_like_all() -> None:
    article = _article("Quarterly update", "Nothing notable happened")
    assert fallbacks.generate_insights(article, "nonsense") == fallbacks.generate_insights(article, "all")
    assert fallbacks.determine_sector(article, None) == fallbacks.CATEGORY_PROFILES["all"]["sector"]


def test_sector_first_match_wins() -> None:
    article = _article("Hospital software engineers in demand", "Healthcare technology hiring")
    assert fallbacks.determine_sector(article, "all") == "Healthcare"


def test_implications_first_match_wins() -> None:
    article = _article("Remote work and automation", "Hybrid teams adopt automated tools")
    assert fallbacks.generate_short_term_implication(article, "all") == fallbacks.SHORT_TERM_KEYWORDS[0][1]
    assert fallbacks.generate_long_term_implication(article, "all") == fallbacks.LONG_TERM_KEYWORDS[0][1]


def test_fallback_document_analysis_uses_file_name_and_frequent_terms() -> None:
    text = (
        "Recruitment automation is rising. Recruitment teams adopt automation tools. "
        "About 45% of employers now use automated screening. Training matters."
    )
    analysis = fallbacks.fallback_document_analysis("reports/hiring-survey.pdf", text)

    assert analysis.title == "hiring-survey"
    assert analysis.category == "Uncategorized"
    assert analysis.tags[:2] == ["recruitment", "automation"]
    assert analysis.key_stats == ["About 45% of employers now use automated screening."]
    assert analysis.summary.startswith("Recruitment automation is rising.")


def test_fallback_document_analysis_without_name_uses_first_sentence() -> None:
    analysis = fallbacks.fallback_document_analysis(None, "Skills gaps widen. Employers respond.")
    assert analysis.title == "Skills gaps widen."
    assert fallbacks.fallback_document_analysis(None, "").title == "Untitled Document"
