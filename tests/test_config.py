from datetime import date

from ytharvest.core.config_file import build_request, load_config
from ytharvest.services.query import construct_query, resolve_terms

CONFIG = """
searchName: migraine
searchTerms: [migraine, aura]
exclusionTerms: [asmr]
channelName: [UCone, UCtwo]
maxResults: 25
outputFile: out/meta.json
startDate: 2024-01-01
minDuration: 120
"""


def test_missing_config_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))
    assert config.search_name is None
    assert config.min_view_count == 1
    assert config.min_duration == 60
    assert config.has_content is True


def test_unparseable_config_uses_defaults(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("searchName: [unclosed", encoding="utf-8")
    assert load_config(str(path)).search_name is None


def test_config_file_is_read(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")

    request = build_request(load_config(str(path)))

    assert request.search_name == "migraine"
    assert request.search_terms == ["migraine", "aura"]
    assert request.exclusion_terms == ["asmr"]
    assert request.channels == ["UCone", "UCtwo"]
    assert request.max_results == 25
    assert request.start_date == date(2024, 1, 1)
    assert request.min_duration == 120
    assert request.min_view_count == 1


def test_overrides_win_field_by_field(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG, encoding="utf-8")

    request = build_request(load_config(str(path)), {
        "search_name": "cluster headache",
        "max_results": 5,
        "channels": None,
        "min_duration": 0,
        "has_content": False,
    })

    assert request.search_name == "cluster headache"
    assert request.max_results == 5
    assert request.channels == ["UCone", "UCtwo"]
    assert request.min_duration == 0
    assert request.has_content is False
    assert request.output_file == "out/meta.json"


def test_disease_alias(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("disease: lupus\n", encoding="utf-8")
    assert build_request(load_config(str(path))).search_name == "lupus"
    assert build_request(load_config(str(path)), {"disease": "gout"}).search_name == "gout"


def test_empty_search_terms_in_config_query_name_only(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("searchName: migraine\nsearchTerms: []\n", encoding="utf-8")

    request = build_request(load_config(str(path)))
    include, exclude = resolve_terms(request.search_name, request.search_phrases, request.search_terms, request.exclusion_terms)

    assert request.search_terms == []
    assert construct_query(request.search_name, include, exclude) == '"migraine"'
