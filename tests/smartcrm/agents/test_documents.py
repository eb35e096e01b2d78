"""Tests for smartcrm.agents.documents — document summarizer normalization."""
import json
from unittest.mock import MagicMock

from smartcrm.agents.documents import build_system_prompt, normalize_summary, summarize_document


def _mock_chat_response(content):
    response = MagicMock()
    response.choices[0].message.content = json.dumps(content) if isinstance(content, dict) else content
    response.usage.total_tokens = 5
    return response


class TestNormalizeSummary:

    def test_valid_reply(self):
        result = normalize_summary(json.dumps({
            'summary': 'An MSA.', 'keyPoints': ['a', 'b'], 'sentiment': 'positive', 'confidence': 91,
        }), 'gpt-4o-mini')
        assert result == {
            'summary': 'An MSA.', 'keyPoints': ['a', 'b'], 'sentiment': 'positive',
            'confidence': 91, 'model': 'gpt-4o-mini',
        }

    def test_out_of_range_values(self):
        result = normalize_summary(json.dumps({
            'summary': '', 'keyPoints': 'a, b', 'sentiment': 'ecstatic', 'confidence': 140,
        }), 'm')
        assert result['summary'] == 'Summary not available'
        assert result['keyPoints'] == []
        assert result['sentiment'] == 'neutral'
        assert result['confidence'] == 100

    def test_missing_confidence_defaults_to_75(self):
        assert normalize_summary('{"summary": "x"}', 'm')['confidence'] == 75

    def test_non_json_falls_back(self):
        text = 'y' * 900
        result = normalize_summary(text, 'm')
        assert result['summary'] == 'y' * 500
        assert result['confidence'] == 50


class TestSummarizeDocument:

    def test_truncates_and_uses_json_mode(self, openai_mock):
        openai_mock.chat.completions.create.return_value = _mock_chat_response({'summary': 'ok'})

        summarize_document('q' * 12000, file_name='contract.pdf')

        kwargs = openai_mock.chat.completions.create.call_args[1]
        assert kwargs['model'] == 'gpt-4o-mini'
        assert kwargs['temperature'] == 0.3
        assert kwargs['response_format'] == {'type': 'json_object'}
        user = kwargs['messages'][-1]['content']
        assert 'titled "contract.pdf"' in user
        assert user.count('q') == 10000

    def test_context_in_system_prompt(self):
        prompt = build_system_prompt({'contactName': 'Jane', 'companyName': 'Acme'})
        assert 'This document is related to Jane from Acme.' in prompt
        assert 'related to' not in build_system_prompt(None)
