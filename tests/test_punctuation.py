import pytest

from hanzikit.punctuation import (
    Punctuation,
    PunctuationConfig,
    PunctuationState,
    lang_by_path,
)
from hanzikit.punctuation_profile import PunctuationEntry, PunctuationProfile

LINES = [". 。", ", ，", '" “ ”', "! ！"]


def make(config=None):
    profile = PunctuationProfile()
    profile.load(LINES)
    return Punctuation(config or PunctuationConfig(), {"zh_CN": profile})


def test_lang_by_path():
    assert lang_by_path("punctuationmap/zh_CN") == "zh_CN"
    assert lang_by_path("other/zh_CN") == ""


def test_push_simple():
    punc = make()
    state = PunctuationState()
    assert punc.push_punctuation("zh_CN", state, ".") == "。"
    assert punc.push_punctuation("zh_CN", state, ord("!")) == "！"


def test_unknown_language_and_disabled():
    punc = make()
    state = PunctuationState()
    assert punc.push_punctuation("ja", state, ".") == ""
    punc.set_enabled(False)
    assert punc.enabled is False
    assert punc.push_punctuation("zh_CN", state, ".") == ""
    assert punc.get_punctuation("zh_CN", ".") == ("", "")


def test_paired_alternates():
    punc = make()
    state = PunctuationState()
    results = [punc.push_punctuation("zh_CN", state, '"') for _ in range(3)]
    assert results == ["“", "”", "“"]


def test_v2_pairs():
    punc = make()
    state = PunctuationState()
    assert punc.push_punctuation_v2("zh_CN", state, '"') == ("“", "")
    assert punc.push_punctuation_v2("zh_CN", state, '"') == ("”", "")
    assert punc.push_punctuation_v2("zh_CN", state, ".") == ("。", "")
    together = make(PunctuationConfig(type_paired_punctuation_together=True))
    assert together.push_punctuation_v2("zh_CN", PunctuationState(), '"') == ("“", "”")


def test_half_width_after_latin_and_cancel():
    punc = make()
    state = PunctuationState()
    punc.on_commit(state, "abc")
    assert state.last_is_eng_or_digit == "c"
    assert punc.push_punctuation("zh_CN", state, ".") == ""
    assert state.not_converted == ord(".")
    assert punc.cancel_last("zh_CN", state) == "。"
    assert state.not_converted == 0
    assert punc.cancel_last("zh_CN", state) == ""


def test_half_width_option_off():
    punc = make(PunctuationConfig(half_width_punc_after_latin_or_number=False))
    state = PunctuationState()
    punc.on_commit(state, "abc")
    assert punc.push_punctuation("zh_CN", state, ".") == "。"


def test_on_commit_non_ascii_resets():
    punc = make()
    state = PunctuationState(last_is_eng_or_digit="a")
    punc.on_commit(state, "中")
    assert state.last_is_eng_or_digit == ""


def test_on_key():
    punc = make()
    state = PunctuationState()
    punc.on_key(state, "7")
    assert state.last_is_eng_or_digit == "7"
    punc.on_key(state, "x", release=True)
    assert state.last_is_eng_or_digit == "7"
    punc.on_key(state, "x", accepted=True)
    assert state.last_is_eng_or_digit == "7"
    punc.on_key(state, "")
    assert state.last_is_eng_or_digit == ""


def test_reset_and_rebuild_from_surrounding():
    punc = make()
    state = PunctuationState()
    assert punc.push_punctuation("zh_CN", state, '"') == "“"
    punc.on_reset(state, True)
    assert state.last_punc_stack == {}
    assert state.may_rebuild_state_from_surrounding_text
    punc.on_surrounding_text_updated(state, "a“b", 3)
    assert state.last_is_eng_or_digit == "b"
    assert state.last_punc_stack == {ord('"'): "“"}
    assert state.last_punc_stack_backup == {}
    assert punc.push_punctuation("zh_CN", state, '"') == "”"


def test_surrounding_restores_not_converted():
    punc = make()
    state = PunctuationState()
    punc.on_commit(state, "a")
    punc.push_punctuation("zh_CN", state, ".")
    punc.on_reset(state, True)
    assert state.not_converted == 0
    punc.on_surrounding_text_updated(state, "a.", 2)
    assert state.not_converted == ord(".")


def test_surrounding_without_rebuild_clears_backup():
    punc = make()
    state = PunctuationState()
    punc.push_punctuation("zh_CN", state, '"')
    punc.on_reset(state, False)
    punc.on_surrounding_text_updated(state, "“", 1)
    assert state.last_punc_stack_backup == {}
    assert state.last_punc_stack == {}


def test_focus_in():
    punc = make()
    state = PunctuationState()
    punc.on_focus_in(state, False)
    assert not state.may_rebuild_state_from_surrounding_text
    punc.on_focus_in(state, True)
    assert state.may_rebuild_state_from_surrounding_text


def test_push_rejects_multi_char_string():
    punc = make()
    with pytest.raises(ValueError):
        punc.push_punctuation("zh_CN", PunctuationState(), "ab")


def test_load_profiles(tmp_path):
    system = tmp_path / "system"
    user = tmp_path / "user"
    system.mkdir()
    user.mkdir()
    (system / "punc.mb.zh_CN").write_text(". 。\n, ，\n", encoding="utf-8")
    (user / "punc.mb.zh_CN").write_text(". ．\n", encoding="utf-8")
    (user / "punc.mb.zh_TW").write_text(", 、\n", encoding="utf-8")
    punc = Punctuation(profiles={"gone": PunctuationProfile()})
    punc.load_profiles(system, user)
    assert sorted(punc.profiles) == ["zh_CN", "zh_TW"]
    assert punc.get_punctuation("zh_CN", ".") == ("．", "")
    assert punc.get_punctuation("zh_CN", ",") == ("", "")
    assert punc.profiles["zh_CN"].default_entries == [
        PunctuationEntry(".", "。"), PunctuationEntry(",", "，")]
    assert punc.profiles["zh_TW"].default_entries == []
    assert punc.get_punctuation("zh_TW", ",") == ("、", "")


def test_sub_config_round_trip(tmp_path):
    system = tmp_path / "system"
    user = tmp_path / "user"
    system.mkdir()
    (system / "punc.mb.zh_CN").write_text(". 。\n", encoding="utf-8")
    punc = Punctuation()
    punc.load_profiles(system, user)
    assert punc.sub_config("punctuationmap/zh_CN") == [PunctuationEntry(".", "。")]
    assert punc.sub_config("punctuationmap/xx") is None
    assert punc.sub_config("zh_CN") is None

    entries = [PunctuationEntry(".", "．"), PunctuationEntry('"', "“", "”")]
    punc.set_sub_config("punctuationmap/zh_CN", entries)
    assert punc.sub_config("punctuationmap/zh_CN") == entries

    reloaded = Punctuation()
    reloaded.load_profiles(system, user)
    assert reloaded.sub_config("punctuationmap/zh_CN") == entries


def test_set_sub_config_unknown_language_ignored(tmp_path):
    punc = make()
    punc.set_sub_config("punctuationmap/xx", [PunctuationEntry(".", "。")], tmp_path)
    assert list(tmp_path.iterdir()) == []
    assert sorted(punc.profiles) == ["zh_CN"]