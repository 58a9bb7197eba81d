from __future__ import annotations

import re
from typing import Sequence

from inbox_digest.categories import CategoryTag
from inbox_digest.config.settings import SiteSignature
from inbox_digest.models import Message
from inbox_digest.rules.BaseRule import NO_MATCH, BaseRule, RuleMatch
from inbox_digest.rules.matcher import domain_is_or_under, domain_matches, match_site


class JobSiteRule(BaseRule):
    name = "job_site"
    priority = 100

    def __init__(self, signatures: Sequence[SiteSignature]):
        self.signatures = tuple(signatures)

    def evaluate(self, message: Message) -> RuleMatch:
        sig = match_site(message.sender_domain, message.text, self.signatures)
        if sig is None:
            return NO_MATCH
        return self.hit(CategoryTag.JOBS_SITES, site_name=sig.name, reason=f"site:{sig.name}")


class InterviewRule(BaseRule):
    name = "interview"
    priority = 50

    # Application / interview / recruiter vocabulary
    PATTERN = re.compile(
        r"\b("
        r"interview\w*"
        r"|recruit(?:er|ers|ing)"
        r"|talent acquisition"
        r"|your application"
        r"|application (?:received|status|update|confirmation)"
        r"|thank you for (?:applying|your application|your interest)"
        r"|we received your application"
        r"|applied (?:for|to)"
        r"|phone screen"
        r"|coding (?:challenge|assessment)"
        r"|online assessment"
        r"|offer letter"
        r"|next steps in (?:the|our) (?:hiring|interview) process"
        r")\b",
        flags=re.IGNORECASE,
    )

    def evaluate(self, message: Message) -> RuleMatch:
        if self.regex(message.text, self.PATTERN):
            return self.hit(CategoryTag.JOBS_INTERVIEW)
        return NO_MATCH


class AcademicReviewRule(BaseRule):
    name = "academic_review"
    priority = 40

    def __init__(self, venue_domains: Sequence[str], keywords: Sequence[str]):
        self.venue_domains = tuple(venue_domains)
        self.keywords = tuple(keywords)

    def evaluate(self, message: Message) -> RuleMatch:
        if domain_matches(message.sender_domain, self.venue_domains):
            return self.hit(CategoryTag.EXTERNAL_ACADEMIC_REVIEW, reason="academic_venue_domain")
        if self.contains_any(message.text, self.keywords):
            return self.hit(CategoryTag.EXTERNAL_ACADEMIC_REVIEW, reason="review_vocabulary")
        return NO_MATCH


class SchoolRule(BaseRule):
    name = "school"
    priority = 30

    PATTERN = re.compile(
        r"\b("
        r"universit(?:y|ies)|college|campus|semester|syllabus|tuition"
        r"|course (?:registration|enrollment|enrolment)|registrar|bursar"
        r"|financial aid|transcript|commencement|graduation"
        r"|professor|faculty|student (?:portal|services|account)"
        r"|canvas|blackboard|moodle|office hours|midterm|final exam"
        r")\b",
        flags=re.IGNORECASE,
    )

    def evaluate(self, message: Message) -> RuleMatch:
        if self.regex(message.text, self.PATTERN):
            return self.hit(CategoryTag.SCHOOL)
        return NO_MATCH


class InternalRule(BaseRule):
    """Sender shares the mailbox owner's domain. Never asserts External/*."""
    name = "internal"
    priority = 10

    def __init__(self, owner_domain: str | None):
        self.owner_domain = (owner_domain or "").lower() or None

    def evaluate(self, message: Message) -> RuleMatch:
        if self.owner_domain and domain_is_or_under(message.sender_domain, self.owner_domain):
            return self.hit(CategoryTag.INTERNAL)
        return NO_MATCH
