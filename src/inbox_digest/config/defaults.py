from __future__ import annotations

from inbox_digest.config.settings import SiteSignature

# Order matters: the first signature that matches wins.
DEFAULT_SITE_SIGNATURES = (
    SiteSignature(name="LinkedIn", domains=("linkedin.com",), keywords=("linkedin job alert", "linkedin jobs")),
    SiteSignature(name="Indeed", domains=("indeed.com", "indeedemail.com"), keywords=("indeed job", "indeed apply")),
    SiteSignature(name="Glassdoor", domains=("glassdoor.com",), keywords=("glassdoor",)),
    SiteSignature(name="ZipRecruiter", domains=("ziprecruiter.com",), keywords=("ziprecruiter",)),
    SiteSignature(name="Handshake", domains=("joinhandshake.com", "handshake.com"), keywords=("handshake job",)),
    SiteSignature(name="Wellfound", domains=("wellfound.com", "angel.co"), keywords=("wellfound",)),
    SiteSignature(name="Monster", domains=("monster.com",), keywords=("monster jobs",)),
    SiteSignature(name="Dice", domains=("dice.com",), keywords=("dice job",)),
    SiteSignature(name="Hired", domains=("hired.com",), keywords=()),
    SiteSignature(name="Greenhouse", domains=("greenhouse.io",), keywords=()),
    SiteSignature(name="Lever", domains=("lever.co",), keywords=()),
    SiteSignature(name="Workday", domains=("myworkday.com", "workday.com"), keywords=()),
    SiteSignature(name="SmartRecruiters", domains=("smartrecruiters.com",), keywords=()),
    SiteSignature(name="Ashby", domains=("ashbyhq.com",), keywords=()),
    SiteSignature(name="iCIMS", domains=("icims.com",), keywords=()),
)

DEFAULT_ACADEMIC_VENUE_DOMAINS = (
    "openreview.net",
    "softconf.com",
    "easychair.org",
    "cmt3.research.microsoft.com",
    "editorialmanager.com",
    "manuscriptcentral.com",
    "elsevier.com",
    "springernature.com",
    "acm.org",
    "ieee.org",
)

DEFAULT_REVIEW_KEYWORDS = (
    "review assignment",
    "reviewer invitation",
    "invitation to review",
    "review request",
    "paper assignment",
    "meta-review",
    "camera-ready",
    "rebuttal",
    "author response",
    "program committee",
    "manuscript",
    "submission #",
    "paper id",
)
