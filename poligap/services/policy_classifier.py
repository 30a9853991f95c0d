"""Keyword-scoring classifier for policy documents.

Decides whether extracted text reads like a policy (privacy policy, security
procedure, compliance document) using three ordered keyword scans:

1. Positive keywords, with an early accept once the score is high and the
   text names a privacy policy or data protection
2. Disqualifying keywords (invoices, recipes, fiction...)
3. Final score threshold
"""

from typing import List, Sequence

from poligap.models.validation import ClassificationVerdict, RejectionCode, VerdictDetails


# ---------------------------------------------------------------------------
# Keyword dictionaries
# ---------------------------------------------------------------------------

POLICY_KEYWORDS = (
    "policy",
    "privacy",
    "security",
    "compliance",
    "procedure",
    "regulation",
    "gdpr",
    "hipaa",
    "data protection",
    "information",
    "personal information",
    "google",
    "collect",
    "use",
    "share",
    "cookies",
    "services",
)

DISQUALIFYING_KEYWORDS = (
    "invoice",
    "receipt",
    "menu",
    "recipe",
    "story",
    "novel",
    "fiction",
)

EARLY_ACCEPT_PHRASES = ("privacy policy", "data protection")

MIN_CONTENT_LENGTH = 300
EARLY_ACCEPT_SCORE = 10
ACCEPT_SCORE = 8
LONG_KEYWORD_LENGTH = 8

SUGGESTION = (
    "Upload a policy document that includes terms such as: privacy policy, "
    "data protection, security, compliance, procedure, regulation, GDPR, HIPAA."
)


def keyword_weight(keyword: str) -> int:
    """Longer, more specific keywords count for more."""
    return 3 if len(keyword) > LONG_KEYWORD_LENGTH else 2


class PolicyClassifier:
    """Scores text against injected keyword dictionaries.

    Stateless: the same text always yields the same verdict.
    """

    def __init__(
        self,
        policy_keywords: Sequence[str] = POLICY_KEYWORDS,
        disqualifying_keywords: Sequence[str] = DISQUALIFYING_KEYWORDS,
        early_accept_phrases: Sequence[str] = EARLY_ACCEPT_PHRASES,
    ):
        self.policy_keywords = tuple(k.lower() for k in policy_keywords)
        self.disqualifying_keywords = tuple(k.lower() for k in disqualifying_keywords)
        self.early_accept_phrases = tuple(p.lower() for p in early_accept_phrases)

    def classify(self, text: str) -> ClassificationVerdict:
        content = text.lower()
        content_length = len(content)

        if content_length < MIN_CONTENT_LENGTH:
            return ClassificationVerdict(
                is_valid=False,
                reason=(
                    f"Document is too short ({content_length} characters). Policy "
                    f"documents should contain at least {MIN_CONTENT_LENGTH} characters of text."
                ),
                code=RejectionCode.DOCUMENT_TOO_SHORT,
                details=VerdictDetails(content_length=content_length, keyword_score=0),
            )

        has_strong_phrase = any(p in content for p in self.early_accept_phrases)
        score = 0
        found: List[str] = []

        for keyword in self.policy_keywords:
            if keyword not in content or keyword in found:
                continue
            score += keyword_weight(keyword)
            found.append(keyword)

            if score >= EARLY_ACCEPT_SCORE and has_strong_phrase:
                return ClassificationVerdict(
                    is_valid=True,
                    details=VerdictDetails(
                        content_length=content_length,
                        keyword_score=score,
                        found_keywords=found,
                        confidence=min(100, score * 8),
                    ),
                )

        # Runs only when no early accept fired; a match wins over any score
        for keyword in self.disqualifying_keywords:
            if keyword in content:
                return ClassificationVerdict(
                    is_valid=False,
                    reason=f"This appears to be a {keyword} document rather than a policy document.",
                    code=RejectionCode.NOT_A_POLICY_DOCUMENT,
                    details=VerdictDetails(
                        content_length=content_length,
                        keyword_score=score,
                        found_keywords=found,
                    ),
                )

        if score < ACCEPT_SCORE:
            return ClassificationVerdict(
                is_valid=False,
                reason=(
                    "Document does not contain enough policy-related language "
                    f"(score {score}/{ACCEPT_SCORE}). Found: {', '.join(found) or 'none'}."
                ),
                code=RejectionCode.INSUFFICIENT_POLICY_LANGUAGE,
                details=VerdictDetails(
                    content_length=content_length,
                    keyword_score=score,
                    found_keywords=found,
                    suggestion=SUGGESTION,
                ),
            )

        return ClassificationVerdict(
            is_valid=True,
            details=VerdictDetails(
                content_length=content_length,
                keyword_score=score,
                found_keywords=found,
                confidence=min(100, score * 10),
            ),
        )


_default_classifier = PolicyClassifier()


def classify_policy_text(text: str) -> ClassificationVerdict:
    """Classify text with the default keyword dictionaries."""
    return _default_classifier.classify(text)
