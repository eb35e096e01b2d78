"""Tests for smartcrm.agents.video — script generation and pending video rows."""
import json
from unittest.mock import MagicMock
from urllib.parse import urlparse, parse_qs

from smartcrm.agents.video import generate_video, parse_video_reply
from smartcrm.models.video import Video, VideoJobStatus
from smartcrm.services.db import get_contact


def _mock_chat_response(content):
    response = MagicMock()
    response.choices[0].message.content = json.dumps(content) if isinstance(content, dict) else content
    response.usage.total_tokens = 77
    return response


class TestParseVideoReply:

    def test_unparseable_keeps_raw_script(self):
        result = parse_video_reply('Scene 1: open on the dashboard.')
        assert result['script'] == 'Scene 1: open on the dashboard.'
        assert result['storyboard'] == []
        assert result['estimatedDuration'] == 60

    def test_wrong_types_are_normalized(self):
        result = parse_video_reply(json.dumps({'script': 's', 'storyboard': 'one scene', 'estimatedDuration': '45s'}))
        assert result['storyboard'] == []
        assert result['estimatedDuration'] == 60


class TestGenerateVideo:

    def test_stores_pending_row(self, openai_mock, make_contact, db_session):
        contact_id = make_contact()
        openai_mock.chat.completions.create.return_value = _mock_chat_response({
            'script': 'Hi Jane, here is Acme in 45 seconds.',
            'storyboard': [{'scene': 1, 'description': 'Logo', 'duration': 5}],
            'estimatedDuration': 45,
            'keyMessages': ['Fast', 'Simple', 'Secure'],
            'visualStyle': 'clean',
        })

        result = generate_video(get_contact(contact_id), 'https://acme.io/product')

        video = db_session.query(Video).one()
        assert video.status == VideoJobStatus.PENDING.value
        assert video.goal == 'demo'
        assert video.estimated_duration == 45
        assert video.key_messages == ['Fast', 'Simple', 'Secure']
        assert result['videoId'] == video.id
        assert result['status'] == 'pending'

        query = parse_qs(urlparse(result['videoUrl']).query)
        assert query['script'] == ['Hi Jane, here is Acme in 45 seconds.']
        assert query['style'] == ['clean']

    def test_plain_text_reply_still_stored(self, openai_mock, make_contact, db_session):
        contact_id = make_contact()
        openai_mock.chat.completions.create.return_value = _mock_chat_response('Just a script.')

        result = generate_video(get_contact(contact_id), 'https://acme.io', goal='follow_up')

        assert result['script'] == 'Just a script.'
        assert result['estimatedDuration'] == 60
        assert db_session.query(Video).one().goal == 'follow_up'
