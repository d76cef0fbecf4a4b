"""Built-in investigation scope presets.

Each preset defines domain context, personas, categories, and suggested
sources for a specific type of investigation.
"""

from __future__ import annotations

from sherlock.models.contracts import (
    DateRangeConfig,
    DateRangeStrategy,
    InvestigationScope,
    PersonaDefinition,
    SourceCategory,
    SuggestedSource,
)

DEFAULT_SCOPE_ID = "open-investigation"


def _persona(persona_id: str, label: str, instruction: str) -> PersonaDefinition:
    return PersonaDefinition(id=persona_id, label=label, instruction=instruction)


def _sources(name: str, *entries: tuple[str, str]) -> SourceCategory:
    return SourceCategory(
        name=name,
        sources=[SuggestedSource(label=label, url=url) for label, url in entries],
    )


_NO_DATE_RANGE = DateRangeConfig(strategy=DateRangeStrategy.NONE)


# =============================================================================
# Personas
# =============================================================================

GOVERNMENT_FRAUD_PERSONAS = [
    _persona(
        "forensic-accountant",
        "Forensic Accountant",
        "You are a world-class forensic accountant and OSINT investigator. Focus on financial "
        "discrepancies, money trails, contract irregularities, and regulatory violations. Your tone "
        "is professional and evidence-based. Prioritize quantifiable findings.",
    ),
    _persona(
        "watchdog-journalist",
        "Watchdog Journalist",
        "You are an award-winning investigative journalist specializing in government accountability. "
        "Focus on public interest, uncovering corruption, verifying sources with extreme rigor, and "
        "following the money. Your tone is objective but compelling.",
    ),
    _persona(
        "intel-analyst",
        "Intelligence Analyst",
        "You are a senior intelligence analyst with government watchdog experience. Focus on "
        "connecting disparate data points, identifying patterns of waste and abuse, and assessing "
        "systemic risks. Your tone is clinical and classified.",
    ),
]

CORPORATE_DD_PERSONAS = [
    _persona(
        "compliance-analyst",
        "Compliance Analyst",
        "You are a senior compliance analyst specializing in corporate due diligence. Focus on "
        "regulatory filings, litigation history, beneficial ownership, sanctions exposure, and ESG "
        "risks. Your tone is thorough and risk-focused.",
    ),
    _persona(
        "ma-researcher",
        "M&A Researcher",
        "You are an M&A due diligence specialist. Focus on financial health, leadership backgrounds, "
        "market positioning, competitive landscape, and hidden liabilities. Your tone is analytical "
        "and investment-focused.",
    ),
    _persona(
        "corporate-investigator",
        "Corporate Investigator",
        "You are a private corporate investigator. Focus on executive backgrounds, corporate "
        "connections, fraud indicators, and reputational risks. Your tone is direct and evidence-based.",
    ),
]

GEOPOLITICAL_PERSONAS = [
    _persona(
        "geopolitical-analyst",
        "Geopolitical Analyst",
        "You are a senior geopolitical analyst at a leading think tank. Focus on international "
        "relations, power dynamics, economic implications, and strategic forecasting. Your tone is "
        "academic yet accessible.",
    ),
    _persona(
        "osint-investigator",
        "OSINT Investigator",
        "You are an open-source intelligence investigator specializing in conflict analysis. Focus on "
        "verifying claims, geolocating events, tracking actors, and exposing disinformation. Your "
        "tone is methodical and evidence-based.",
    ),
    _persona(
        "risk-advisor",
        "Political Risk Advisor",
        "You are a political risk advisor for multinational organizations. Focus on country risk, "
        "regulatory changes, sanctions implications, and scenario planning. Your tone is strategic "
        "and business-oriented.",
    ),
]

CYBERSECURITY_PERSONAS = [
    _persona(
        "threat-hunter",
        "Threat Hunter",
        "You are a senior threat intelligence analyst. Focus on IOCs, TTPs, attribution, and threat "
        "actor profiling. Use MITRE ATT&CK framework where applicable. Your tone is technical and precise.",
    ),
    _persona(
        "security-researcher",
        "Security Researcher",
        "You are a vulnerability researcher and security analyst. Focus on CVEs, exploit analysis, "
        "attack surface assessment, and remediation guidance. Your tone is technical but actionable.",
    ),
    _persona(
        "incident-responder",
        "Incident Responder",
        "You are a DFIR specialist. Focus on forensic artifacts, timeline reconstruction, lateral "
        "movement, and containment strategies. Your tone is urgent and methodical.",
    ),
]

COMPETITIVE_INTEL_PERSONAS = [
    _persona(
        "market-analyst",
        "Market Analyst",
        "You are a competitive intelligence analyst. Focus on market positioning, product strategy, "
        "pricing, partnerships, and growth signals. Your tone is strategic and business-focused.",
    ),
    _persona(
        "tech-scout",
        "Technology Scout",
        "You are a technology scout tracking innovation and emerging players. Focus on patents, "
        "technical capabilities, talent acquisition, and R&D investments. Your tone is forward-looking.",
    ),
]

OPEN_INVESTIGATION_PERSONAS = [
    _persona(
        "general-investigator",
        "General Investigator",
        "You are a versatile OSINT investigator. Adapt your approach to the subject matter. Focus on "
        "verifying information, connecting entities, and developing leads. Your tone is professional "
        "and thorough.",
    ),
    _persona(
        "journalist",
        "Journalist",
        "You are an investigative journalist. Focus on public interest, source verification, and "
        "compelling narratives backed by evidence. Your tone is objective but engaging.",
    ),
    _persona(
        "researcher",
        "Academic Researcher",
        "You are an academic researcher. Focus on comprehensive literature review, primary sources, "
        "and systematic analysis. Your tone is scholarly and well-cited.",
    ),
]


# =============================================================================
# Scopes
# =============================================================================

BUILTIN_SCOPES: list[InvestigationScope] = [
    InvestigationScope(
        id="government-fraud",
        name="Government Fraud",
        description="Investigate federal spending, grants, contracts, and potential waste, fraud, "
        "or abuse in government programs.",
        domain_context="You are investigating potential fraud, waste, and abuse in U.S. government "
        "spending, federal grants, and public contracts. Focus on financial irregularities, "
        "overbilling, no-bid contracts, and misuse of taxpayer funds.",
        investigation_objective="Identify financial discrepancies, suspicious contracts, conflicts "
        "of interest, and evidence of misappropriation of public funds.",
        default_date_range=_NO_DATE_RANGE,
        suggested_sources=[
            _sources(
                "Primary Databases",
                ("USASpending.gov", "https://usaspending.gov"),
                ("SAM.gov", "https://sam.gov"),
                ("FEC.gov", "https://fec.gov"),
                ("FPDS", "https://fpds.gov"),
            ),
            _sources(
                "Oversight & Audits",
                ("GAO.gov", "https://gao.gov"),
                ("Inspector General Reports", "https://ignet.gov"),
                ("FOIA.gov", "https://foia.gov"),
            ),
            _sources(
                "Watchdog Organizations",
                ("OpenSecrets", "https://opensecrets.org"),
                ("ProPublica", "https://propublica.org"),
                ("GovTrack", "https://govtrack.us"),
                ("POGO", "https://pogo.org"),
            ),
            _sources(
                "Legal & Court Records",
                ("PACER", "https://pacer.uscourts.gov"),
                ("DOJ Press Releases", "https://justice.gov/news"),
            ),
        ],
        categories=["Finance", "Healthcare", "Defense", "Education", "Infrastructure", "Grants", "Contracts"],
        personas=GOVERNMENT_FRAUD_PERSONAS,
        default_persona="forensic-accountant",
        icon="🎯",
        is_built_in=True,
    ),
    InvestigationScope(
        id="corporate-due-diligence",
        name="Corporate Due Diligence",
        description="Research companies for M&A, investment, or compliance purposes. Uncover risks, "
        "litigation, and leadership issues.",
        domain_context="You are conducting corporate due diligence research. Focus on company "
        "financials, regulatory filings, litigation history, executive backgrounds, beneficial "
        "ownership, and potential compliance or reputational risks.",
        investigation_objective="Assess corporate health, identify hidden liabilities, verify "
        "leadership claims, and uncover regulatory or legal risks.",
        default_date_range=_NO_DATE_RANGE,
        suggested_sources=[
            _sources(
                "Regulatory Filings",
                ("SEC EDGAR", "https://sec.gov/edgar"),
                ("OpenCorporates", "https://opencorporates.com"),
            ),
            _sources(
                "Business Intelligence",
                ("Crunchbase", "https://crunchbase.com"),
                ("LinkedIn", "https://linkedin.com"),
                ("Bloomberg", "https://bloomberg.com"),
                ("Reuters", "https://reuters.com"),
            ),
            _sources(
                "Legal Records",
                ("PACER", "https://pacer.uscourts.gov"),
                ("CourtListener", "https://courtlistener.com"),
            ),
            _sources(
                "News & Analysis",
                ("Financial Times", "https://ft.com"),
                ("Wall Street Journal", "https://wsj.com"),
                ("The Information", "https://theinformation.com"),
            ),
        ],
        categories=["Finance", "Legal", "Leadership", "M&A", "Compliance", "ESG", "Market Position"],
        personas=CORPORATE_DD_PERSONAS,
        default_persona="compliance-analyst",
        icon="🏢",
        is_built_in=True,
    ),
    InvestigationScope(
        id="geopolitical-analysis",
        name="Geopolitical Analysis",
        description="Analyze international relations, conflicts, sanctions, and political "
        "developments across regions.",
        domain_context="You are conducting geopolitical analysis. Focus on international relations, "
        "power dynamics, conflicts, sanctions, trade policies, and their implications for various "
        "stakeholders.",
        investigation_objective="Understand geopolitical dynamics, assess risks, track actors and "
        "alliances, and forecast potential developments.",
        default_date_range=_NO_DATE_RANGE,
        suggested_sources=[
            _sources(
                "Government Sources",
                ("U.S. State Department", "https://state.gov"),
                ("United Nations", "https://un.org"),
            ),
            _sources(
                "Think Tanks",
                ("CSIS", "https://csis.org"),
                ("Council on Foreign Relations", "https://cfr.org"),
                ("Brookings Institution", "https://brookings.edu"),
                ("RAND Corporation", "https://rand.org"),
            ),
            _sources(
                "OSINT & Verification",
                ("Bellingcat", "https://bellingcat.com"),
                ("SIPRI", "https://sipri.org"),
                ("Crisis Group", "https://crisisgroup.org"),
            ),
        ],
        categories=["Geopolitics", "Military", "Diplomacy", "Trade", "Sanctions", "Conflict", "Energy"],
        personas=GEOPOLITICAL_PERSONAS,
        default_persona="geopolitical-analyst",
        icon="🌐",
        is_built_in=True,
    ),
    InvestigationScope(
        id="cybersecurity-research",
        name="Cybersecurity Research",
        description="Research threats, vulnerabilities, APT groups, and security incidents in the "
        "cyber domain.",
        domain_context="You are conducting cybersecurity research. Focus on threat actors, "
        "vulnerabilities, attack techniques, indicators of compromise, and security incidents. Use "
        "technical precision and reference frameworks like MITRE ATT&CK.",
        investigation_objective="Identify threats, analyze attack patterns, attribute malicious "
        "activity, and provide actionable security intelligence.",
        default_date_range=_NO_DATE_RANGE,
        suggested_sources=[
            _sources(
                "Vulnerability Databases",
                ("NVD (NIST)", "https://nvd.nist.gov"),
                ("CVE.org", "https://cve.org"),
                ("Exploit-DB", "https://exploit-db.com"),
            ),
            _sources(
                "Threat Intelligence",
                ("MITRE ATT&CK", "https://attack.mitre.org"),
                ("CISA Advisories", "https://cisa.gov/uscert"),
                ("VirusTotal", "https://virustotal.com"),
            ),
            _sources(
                "Security News",
                ("KrebsOnSecurity", "https://krebsonsecurity.com"),
                ("The Hacker News", "https://thehackernews.com"),
                ("BleepingComputer", "https://bleepingcomputer.com"),
            ),
        ],
        categories=["Cybersecurity", "Malware", "APT", "Vulnerabilities", "Incidents", "Infrastructure", "Ransomware"],
        personas=CYBERSECURITY_PERSONAS,
        default_persona="threat-hunter",
        icon="🔒",
        is_built_in=True,
    ),
    InvestigationScope(
        id="competitive-intelligence",
        name="Competitive Intelligence",
        description="Research competitors, market trends, product strategies, and industry dynamics.",
        domain_context="You are conducting competitive intelligence research. Focus on market "
        "positioning, product strategies, pricing, partnerships, funding, talent moves, and "
        "technology developments.",
        investigation_objective="Understand competitive landscape, identify market opportunities, "
        "track competitor moves, and inform strategic decisions.",
        default_date_range=_NO_DATE_RANGE,
        suggested_sources=[
            _sources(
                "Business Intelligence",
                ("Crunchbase", "https://crunchbase.com"),
                ("PitchBook", "https://pitchbook.com"),
            ),
            _sources(
                "Tech News",
                ("TechCrunch", "https://techcrunch.com"),
                ("Ars Technica", "https://arstechnica.com"),
            ),
            _sources(
                "Patents & IP",
                ("Google Patents", "https://patents.google.com"),
                ("USPTO", "https://uspto.gov"),
            ),
        ],
        categories=["Tech", "Finance", "Product", "Marketing", "Funding", "M&A", "Talent"],
        personas=COMPETITIVE_INTEL_PERSONAS,
        default_persona="market-analyst",
        icon="📊",
        is_built_in=True,
    ),
    InvestigationScope(
        id="open-investigation",
        name="Open Investigation",
        description="General-purpose investigation with no domain constraints. Define your own "
        "sources and approach.",
        domain_context="You are conducting an open-ended investigation. Adapt your approach based on "
        "the subject matter. Be thorough, verify information from multiple sources, and develop "
        "actionable leads.",
        investigation_objective="Investigate the subject comprehensively, verify claims, identify key "
        "entities and connections, and surface relevant findings.",
        default_date_range=_NO_DATE_RANGE,
        suggested_sources=[],
        categories=["All", "News", "Social", "Official", "Legal", "Financial", "Technical"],
        personas=OPEN_INVESTIGATION_PERSONAS,
        default_persona="general-investigator",
        icon="🔍",
        is_built_in=True,
    ),
]

_SCOPES_BY_ID = {scope.id: scope for scope in BUILTIN_SCOPES}


def get_scope_by_id(scope_id: str) -> InvestigationScope | None:
    return _SCOPES_BY_ID.get(scope_id)


def get_default_scope() -> InvestigationScope:
    return _SCOPES_BY_ID[DEFAULT_SCOPE_ID]


def get_all_scopes(custom_scopes: list[InvestigationScope] | None = None) -> list[InvestigationScope]:
    """Built-in scopes followed by any custom (non built-in) scopes."""
    custom = [scope for scope in (custom_scopes or []) if not scope.is_built_in]
    return [*BUILTIN_SCOPES, *custom]


__all__ = [
    "BUILTIN_SCOPES",
    "DEFAULT_SCOPE_ID",
    "get_scope_by_id",
    "get_default_scope",
    "get_all_scopes",
]
