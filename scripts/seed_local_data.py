#!/usr/bin/env python3
"""
Seed a local SQLite database with CRM data for exercising the API by hand.

Creates contacts, deals, activities, the three inbound-email agents and a
spread of email events, form submissions and automation triggers so every
Zapier trigger returns more than one page at limit=5.

Usage:
    python scripts/seed_local_data.py          # seed
    python scripts/seed_local_data.py --clear  # wipe seeded rows first

Requires: DATABASE_URL unset (defaults to sqlite:///local.db) or pointing at a
scratch database. Never run against the Supabase instance.
"""
import sys
import os
import uuid
import argparse
from datetime import datetime, timezone, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from smartcrm import create_app
from smartcrm.database import get_session, engine, Base
from smartcrm.models.activity import Activity
from smartcrm.models.agent import OutboundAgent, AgentLog
from smartcrm.models.contact import Contact
from smartcrm.models.deal import Deal
from smartcrm.models.events import EmailEvent, FormSubmission, AutomationTrigger


CONTACTS = [
    {'first': 'Jane',   'last': 'Morrison', 'company': 'Acme Corp',      'title': 'VP Sales',        'industry': 'SaaS'},
    {'first': 'Carlos', 'last': 'Reyes',    'company': 'Globex',         'title': 'CTO',             'industry': 'Manufacturing'},
    {'first': 'Priya',  'last': 'Sharma',   'company': 'Initech',        'title': 'Head of Ops',     'industry': 'Fintech'},
    {'first': 'Liam',   'last': "O'Brien",  'company': 'Umbrella Health', 'title': 'Director of IT',  'industry': 'Healthcare'},
    {'first': 'Emma',   'last': 'Chen',     'company': 'Hooli',          'title': 'Marketing Lead',  'industry': 'Media'},
    {'first': 'Derek',  'last': 'Williams', 'company': 'Vandelay',       'title': 'Founder',         'industry': 'Logistics'},
    {'first': 'Aisha',  'last': 'Mohammed', 'company': 'Stark Retail',   'title': 'Buyer',           'industry': 'Retail'},
    {'first': 'Jonas',  'last': 'Müller',   'company': 'Wayne Labs',     'title': 'Procurement',     'industry': 'Biotech'},
]

AGENTS = [
    ('sales_qualification', 'Sales Qualification', 'Qualify inbound sales inquiries.'),
    ('support_response', 'Support Response', 'Triage support questions.'),
    ('general_agent', 'General Agent', 'Answer general inbound email.'),
]

# Prefix for seeded IDs so we can clear them
SEED_PREFIX = 'seed-'


def make_id():
    return SEED_PREFIX + str(uuid.uuid4())


def seed_contacts(session, now):
    contacts = []
    for i, c in enumerate(CONTACTS):
        created = now - timedelta(days=len(CONTACTS) - i)
        contact = Contact(
            id=make_id(),
            name=f"{c['first']} {c['last']}",
            first_name=c['first'],
            last_name=c['last'],
            email=f"{c['first'].lower()}@{c['company'].split()[0].lower()}.example.com",
            company=c['company'],
            title=c['title'],
            industry=c['industry'],
            status='lead' if i % 2 else 'prospect',
            interest_level='high' if i < 3 else 'medium',
            source='seed',
            custom_fields={'region': 'NA' if i % 2 else 'EMEA'},
            created_at=created,
            updated_at=created + timedelta(hours=i),
        )
        session.add(contact)
        contacts.append(contact)
    session.flush()
    return contacts


def seed_deals(session, contacts, now):
    for i, contact in enumerate(contacts[:5]):
        session.add(Deal(
            id=make_id(),
            contact_id=contact.id,
            title=f'{contact.company} platform rollout',
            company=contact.company,
            value=25000 + i * 10000,
            stage=['discovery', 'proposal', 'negotiation', 'proposal', 'closed_won'][i],
            status='open',
            expected_close_date=now + timedelta(days=30 + i * 7),
            source='seed',
            created_at=now - timedelta(days=5 - i),
        ))


def seed_activities(session, contacts, now):
    for i, contact in enumerate(contacts):
        session.add(Activity(
            id=make_id(), contact_id=contact.id, type='email_sent',
            description='Intro email', created_at=now - timedelta(days=20 + i),
        ))
        if i % 3 == 0:
            session.add(Activity(
                id=make_id(), contact_id=contact.id, type='email_reply',
                description='Replied asking for pricing', created_at=now - timedelta(days=10 + i),
            ))


def seed_agents(session):
    for key, name, prompt in AGENTS:
        if session.query(OutboundAgent).filter_by(key=key).first() is None:
            session.add(OutboundAgent(id=make_id(), key=key, name=name, system_prompt=prompt))


def seed_events(session, contacts, now):
    for i, contact in enumerate(contacts):
        session.add(EmailEvent(
            id=make_id(), email_id=f'msg-{i}', contact_id=contact.id,
            event_type='open' if i % 2 else 'click',
            link_url=None if i % 2 else 'https://example.com/pricing',
            user_agent='Mozilla/5.0', ip_address='203.0.113.10',
            device_info={'type': 'desktop'}, created_at=now - timedelta(hours=i * 3),
        ))
        session.add(FormSubmission(
            id=make_id(), form_id='demo-request', contact_id=contact.id,
            responses={'teamSize': 10 + i}, submitted_at=now - timedelta(hours=i * 5),
            source='website',
        ))
        session.add(AutomationTrigger(
            id=make_id(), event_type='contact_created', record_id=contact.id,
            contact_id=contact.id, source='seed', webhook_id=None,
            triggered_at=now - timedelta(hours=i * 7), meta={'seeded': True},
        ))


def clear_seeded_data(session):
    deleted = 0
    for model in (AutomationTrigger, FormSubmission, EmailEvent, AgentLog, Activity, Deal, OutboundAgent, Contact):
        deleted += session.query(model).filter(model.id.like(f'{SEED_PREFIX}%')).delete(synchronize_session=False)
    session.commit()
    print(f'Cleared {deleted} seeded rows.')


def main():
    parser = argparse.ArgumentParser(description='Seed local CRM data')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    args = parser.parse_args()

    if not str(engine.url).startswith('sqlite'):
        print(f'Refusing to seed non-SQLite database: {engine.url}')
        sys.exit(1)

    create_app()
    # Ensure tables exist (SQLite local dev only; Supabase owns the real schema)
    Base.metadata.create_all(engine)

    session = get_session()
    try:
        if args.clear or args.clear_only:
            clear_seeded_data(session)
            if args.clear_only:
                return

        print('Seeding local data...')
        now = datetime.now(timezone.utc)
        contacts = seed_contacts(session, now)
        seed_deals(session, contacts, now)
        seed_activities(session, contacts, now)
        seed_agents(session)
        seed_events(session, contacts, now)
        session.commit()
        print(f'\nDone! {len(contacts)} contacts. Try GET /api/zapier/trigger?trigger=new_contacts&limit=5')

    except Exception as e:
        session.rollback()
        print(f'Error: {e}')
        raise
    finally:
        session.close()


if __name__ == '__main__':
    main()
