import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from lexibayes.entities import TaggedToken
from lexibayes.exceptions import TaggingDisabledError
from lexibayes.preprocessing import InMemoryStopWordStore, NLTKTagger, TextPreprocessor, clean_special_characters


def test_remove_stop_words():
    store = InMemoryStopWordStore({"default": ["the", "a"]})
    preprocessor = TextPreprocessor(stop_word_store=store)

    assert asyncio.run(preprocessor.remove_stop_words("the cat sat")) == "cat sat"


def test_remove_stop_words_uses_first_list_only():
    store = InMemoryStopWordStore({"first": ["cat"], "second": ["sat"]})
    preprocessor = TextPreprocessor(stop_word_store=store)

    assert asyncio.run(preprocessor.remove_stop_words("the cat sat")) == "the sat"


def test_remove_stop_words_degrades_when_store_fails():
    store = MagicMock()
    store.get_all = AsyncMock(side_effect=ConnectionError("cache down"))
    preprocessor = TextPreprocessor(stop_word_store=store)

    assert asyncio.run(preprocessor.remove_stop_words("the cat sat")) == "the cat sat"


@pytest.mark.parametrize("lists", [[], [{"values": []}], [{"id": "x"}]])
def test_remove_stop_words_degrades_when_store_is_empty(lists):
    store = MagicMock()
    store.get_all = AsyncMock(return_value=lists)
    preprocessor = TextPreprocessor(stop_word_store=store)

    assert asyncio.run(preprocessor.remove_stop_words("the cat sat")) == "the cat sat"


def test_remove_stop_words_without_store():
    assert asyncio.run(TextPreprocessor().remove_stop_words("the cat")) == "the cat"


def test_update_stop_word_list():
    store = InMemoryStopWordStore()
    preprocessor = TextPreprocessor(stop_word_store=store)

    asyncio.run(preprocessor.update_stop_word_list(["of", "to"], "default"))

    assert asyncio.run(store.get_all()) == [{"id": "default", "values": ["of", "to"]}]


def test_update_stop_word_list_propagates_errors():
    store = MagicMock()
    store.update = AsyncMock(side_effect=ConnectionError("cache down"))
    preprocessor = TextPreprocessor(stop_word_store=store)

    with pytest.raises(ConnectionError):
        asyncio.run(preprocessor.update_stop_word_list(["of"], "default"))


def test_build_stop_word_list_reads_csv(tmp_path):
    path = tmp_path / "stopwords.csv"
    path.write_text("word,language\nthe,en\nder,de\n", encoding="utf-8")

    rows = TextPreprocessor().build_stop_word_list(str(path))

    assert rows == [{"word": "the", "language": "en"}, {"word": "der", "language": "de"}]


def test_build_stop_word_list_missing_file(tmp_path):
    with pytest.raises(OSError):
        TextPreprocessor().build_stop_word_list(str(tmp_path / "missing.csv"))


def test_clean_special_characters():
    assert clean_special_characters("  Hello, world! (ok?) ") == "Hello world ok"
    assert clean_special_characters("Hello, world!", tokenize=True) == ["Hello", "world"]
    assert TextPreprocessor().clean_special_characters("a_b-c") == "a_bc"


def test_tagging_requires_enabling():
    with pytest.raises(TaggingDisabledError):
        TextPreprocessor().tag(["Marie", "Curie"])


def test_tag_with_injected_tagger():
    tagger = MagicMock()
    tagger.tag.return_value = [("Marie", "NNP"), ("Curie", "NNP"), ("was", "VBD"), ("brilliant", "JJ")]
    preprocessor = TextPreprocessor(pos_tag=True, tagger=tagger)

    tagged = preprocessor.tag(["Marie", "Curie", "was", "brilliant"])
    result = preprocessor.extract_entities(["Marie", "Curie", "was", "brilliant"], {"NNP": "people"})

    assert tagged["taggedWords"][0] == TaggedToken("Marie", "NNP")
    assert result["people"] == ["Marie Curie"]
    assert result.stop_words == ["was", "brilliant"]


def test_nltk_tagger_delegates_to_pos_tag(mocker):
    pos_tag = mocker.patch("lexibayes.preprocessing.nltk.pos_tag", return_value=[("Paris", "NNP")])

    tagger = NLTKTagger(auto_download=False)

    assert tagger.tag(["Paris"]) == [("Paris", "NNP")]
    pos_tag.assert_called_once_with(["Paris"], lang="eng")


def test_nltk_tagger_downloads_missing_resource(mocker):
    mocker.patch("lexibayes.preprocessing.nltk.data.find", side_effect=LookupError("missing"))
    download = mocker.patch("lexibayes.preprocessing.nltk.download")

    NLTKTagger(auto_download=True)

    download.assert_called_once_with("averaged_perceptron_tagger_eng", quiet=True)
