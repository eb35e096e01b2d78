"""
Smart enrichment — rule-based contact/company/social enrichment.

Each enricher copies the input, adds derived fields for the options the
caller switched on, and records one log line per enrichment. Confidence
grows with the number of enrichments applied.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List

logger = logging.getLogger('services.enrichment')

BASE_CONFIDENCE = 50
CONFIDENCE_PER_ITEM = 10

EMAIL_PROVIDERS = {
    'gmail.com': 'Gmail',
    'yahoo.com': 'Yahoo',
    'hotmail.com': 'Hotmail',
    'outlook.com': 'Outlook',
}


def calculate_confidence(log: List[str]) -> int:
    return min(100, BASE_CONFIDENCE + len(log) * CONFIDENCE_PER_ITEM)


def _result(original: Dict[str, Any], enriched: Dict[str, Any], log: List[str]) -> Dict[str, Any]:
    return {
        'originalData': original,
        'enrichedData': enriched,
        'enrichmentLog': log,
        'confidence': calculate_confidence(log),
        'enrichedAt': datetime.now(timezone.utc).isoformat(),
    }


# ── Field-level helpers ──────────────────────────────────────────────────────

def email_provider(email: str) -> str:
    domain = email.split('@')[-1].lower()
    return EMAIL_PROVIDERS.get(domain, 'Other')


def enrich_email(email: str) -> Dict[str, Any]:
    return {
        'domain': email.split('@')[-1],
        'isValid': '@' in email,
        'isDisposable': False,
        'provider': email_provider(email),
    }


def enrich_phone(phone: str) -> Dict[str, Any]:
    digits = normalize_phone(phone)
    return {
        'country': 'US' if len(digits) in (10, 11) else 'Unknown',
        'type': 'unknown',
        'carrier': 'Unknown',
    }


def enrich_name(name: str) -> Dict[str, Any]:
    parts = normalize_name(name).split(' ')
    return {
        'firstName': parts[0],
        'lastName': parts[-1],
        'middleName': ' '.join(parts[1:-1]) if len(parts) > 2 else None,
    }


def enrich_address(address: str) -> Dict[str, Any]:
    return {
        'formatted': address.strip(),
        'components': {'street': '', 'city': '', 'state': '', 'zip': ''},
    }


def enrich_company_info(name: str) -> Dict[str, Any]:
    slug = re.sub(r'[^a-z0-9]', '', name.lower())
    return {
        'name': name,
        'domain': f'{slug}.com',
        'industry': 'Unknown',
        'size': 'Unknown',
    }


def normalize_name(name: str) -> str:
    return re.sub(r'\s+', ' ', name.strip())


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    return re.sub(r'\D', '', phone)


# ── Enrichment types ─────────────────────────────────────────────────────────

def enrich_contact_data(contact: Dict[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    enriched = dict(contact)
    log = []

    if contact.get('email') and options.get('enrichEmail'):
        enriched['emailData'] = enrich_email(contact['email'])
        log.append('Email enriched')

    if contact.get('phone') and options.get('enrichPhone'):
        enriched['phoneData'] = enrich_phone(contact['phone'])
        log.append('Phone enriched')

    if contact.get('name') and options.get('enrichName'):
        enriched['nameData'] = enrich_name(contact['name'])
        log.append('Name enriched')

    if contact.get('address') and options.get('enrichAddress'):
        enriched['addressData'] = enrich_address(contact['address'])
        log.append('Address enriched')

    return _result(contact, enriched, log)


def enrich_company_data(company: Dict[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    enriched = dict(company)
    log = []

    if company.get('name') and options.get('enrichCompanyInfo'):
        enriched['companyInfo'] = enrich_company_info(company['name'])
        log.append('Company info enriched')

    if options.get('classifyIndustry'):
        enriched['industry'] = company.get('industry') or 'Technology'
        log.append('Industry classified')

    if options.get('estimateSize'):
        enriched['size'] = company.get('size') or '51-200'
        log.append('Company size estimated')

    return _result(company, enriched, log)


def enrich_social_data(contact: Dict[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    enriched = dict(contact)
    log = []

    if options.get('findSocialProfiles'):
        enriched['socialProfiles'] = {
            'linkedin': contact.get('linkedin') or contact.get('linkedinUrl'),
            'twitter': contact.get('twitter'),
            'facebook': contact.get('facebook'),
        }
        log.append('Social profiles discovered')

    if options.get('getSocialMetrics') and enriched.get('socialProfiles'):
        enriched['socialMetrics'] = {'followers': 0, 'posts': 0, 'engagement': 0}
        log.append('Social metrics retrieved')

    return _result(contact, enriched, log)


def comprehensive_enrichment(data: Dict[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    result = enrich_contact_data(data, options)

    company = data.get('company')
    if isinstance(company, dict):
        company_result = enrich_company_data(company, options)
        result['enrichedData']['companyData'] = company_result['enrichedData']
        result['enrichmentLog'].extend(company_result['enrichmentLog'])

    social_result = enrich_social_data(data, options)
    result['enrichedData']['socialData'] = social_result['enrichedData']
    result['enrichmentLog'].extend(social_result['enrichmentLog'])

    result['confidence'] = calculate_confidence(result['enrichmentLog'])
    return result


def basic_enrichment(data: Dict[str, Any], options: Dict[str, Any]) -> Dict[str, Any]:
    enriched = dict(data)
    log = []

    if data.get('name'):
        enriched['normalizedName'] = normalize_name(data['name'])
        log.append('Name normalized')

    if data.get('email'):
        enriched['normalizedEmail'] = normalize_email(data['email'])
        log.append('Email normalized')

    if data.get('phone'):
        enriched['normalizedPhone'] = normalize_phone(data['phone'])
        log.append('Phone normalized')

    return _result(data, enriched, log)


ENRICHERS = {
    'contact': enrich_contact_data,
    'company': enrich_company_data,
    'social': enrich_social_data,
    'comprehensive': comprehensive_enrichment,
}


def perform_smart_enrichment(data: Dict[str, Any], enrichment_type: str,
                             options: Dict[str, Any] = None) -> Dict[str, Any]:
    """Dispatch to the enricher for the type; unknown types get basic normalization."""
    if not isinstance(data, dict):
        raise ValueError('data must be an object')
    enricher = ENRICHERS.get(enrichment_type, basic_enrichment)
    result = enricher(data, options or {})
    logger.debug("Enrichment type=%s applied %d steps", enrichment_type, len(result['enrichmentLog']))
    return result
