"""Unit tests for the newline-delimited JSON stream decoder."""

import json
import random

import pytest

from xcstrings_translator.translation.stream import LineDecoder, decode_event, iter_fragments

FRAGMENTS = ["Bon", "jour", " à", " tous", " 👋", "\n", '"quoted"']


def _body(fragments: list[str]) -> str:
    lines = [json.dumps({"model": "llama3", "response": f, "done": False}) for f in fragments]
    lines.append(json.dumps({"model": "llama3", "response": "", "done": True}))
    return "\n".join(lines) + "\n"


def _split(text: str, cuts: list[int]) -> list[str]:
    bounds = [0, *sorted(cuts), len(text)]
    return [text[a:b] for a, b in zip(bounds, bounds[1:])]


@pytest.mark.unit
class TestDecodeEvent:
    def test_response_fragment(self):
        assert decode_event('{"response": "Bon"}') == "Bon"

    def test_blank_line(self):
        assert decode_event("   ") is None

    def test_malformed_json(self):
        assert decode_event('{"response": "Bo') is None

    def test_non_object_payload(self):
        assert decode_event('["Bon"]') is None

    def test_deeply_nested_json(self):
        assert decode_event("[" * 100_000 + "]" * 100_000) is None

    def test_missing_response(self):
        assert decode_event('{"done": true}') is None

    def test_empty_response(self):
        assert decode_event('{"response": ""}') is None

    def test_non_string_response(self):
        assert decode_event('{"response": 7}') is None

    def test_carriage_return_tolerated(self):
        assert decode_event('{"response": "Bon"}\r') == "Bon"


@pytest.mark.unit
class TestLineDecoder:
    def test_deeply_nested_line_skipped(self):
        nested = "[" * 100_000 + "]" * 100_000
        body = nested + "\n" + '{"response":"Bonjour"}\n'
        assert list(iter_fragments([body])) == ["Bonjour"]

    def test_complete_lines_decoded(self):
        decoder = LineDecoder()
        assert decoder.feed('{"response":"Bon"}\n{"response":"jour"}\n') == ["Bon", "jour"]
        assert decoder.pending == ""

    def test_partial_line_held_back(self):
        decoder = LineDecoder()
        assert decoder.feed('{"response":"Bon"}\n{"respo') == ["Bon"]
        assert decoder.pending == '{"respo'
        assert decoder.feed('nse":"jour"}\n') == ["jour"]

    def test_malformed_complete_line_skipped(self):
        decoder = LineDecoder()
        assert decoder.feed('{"response":"Bon"}\nnot json\n{"response":"jour"}\n') == [
            "Bon",
            "jour",
        ]

    def test_flush_decodes_unterminated_final_line(self):
        decoder = LineDecoder()
        assert decoder.feed('{"response":"Bon"}\n{"response":"jour"}') == ["Bon"]
        assert decoder.flush() == ["jour"]
        assert decoder.pending == ""

    def test_flush_ignores_incomplete_payload(self):
        decoder = LineDecoder()
        decoder.feed('{"response":"Bo')
        assert decoder.flush() == []

    def test_flush_twice_is_harmless(self):
        decoder = LineDecoder()
        decoder.feed('{"response":"Bon"}')
        assert decoder.flush() == ["Bon"]
        assert decoder.flush() == []


@pytest.mark.unit
class TestChunkBoundaryIndependence:
    def test_single_chunk(self):
        assert list(iter_fragments([_body(FRAGMENTS)])) == FRAGMENTS

    def test_every_two_way_split(self):
        body = _body(FRAGMENTS)
        for cut in range(len(body) + 1):
            assert "".join(iter_fragments(_split(body, [cut]))) == "".join(FRAGMENTS)

    def test_one_character_chunks(self):
        body = _body(FRAGMENTS)
        assert list(iter_fragments(list(body))) == FRAGMENTS

    def test_random_chunkings(self):
        body = _body(FRAGMENTS)
        rng = random.Random(1234)
        for _ in range(200):
            cuts = rng.sample(range(1, len(body)), k=rng.randint(1, 12))
            assert list(iter_fragments(_split(body, cuts))) == FRAGMENTS

    def test_missing_trailing_newline(self):
        body = _body(FRAGMENTS).rstrip("\n")
        assert list(iter_fragments(_split(body, [5, 40]))) == FRAGMENTS
