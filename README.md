# hanzikit

Building blocks for Chinese input and text processing. The package uses only the standard library.

- `hanzikit.chttrans`: simplified ⇄ traditional conversion. `NativeBackend` reads a table of `<simplified><traditional>` lines (from a file or with `load_lines`). `Chttrans` switches conversion on and off for each `InputMethod` and keeps segment boundaries and the cursor in `filter_output`.
- `hanzikit.fullwidth`: `to_fullwidth` turns printable ASCII into its full width form and leaves spaces alone. `fullwidth_char` maps a single code. The `Fullwidth` class is a toggleable mode that responds to hotkeys.
- `hanzikit.punctuation_profile`: `PunctuationProfile` holds one language's `<key> <mapping> [<alternative>]` map. It can load the map, dump it and save it.
- `hanzikit.punctuation`: `Punctuation` loads `punc.mb.<lang>` profiles from a system directory and a user directory. It alternates paired punctuation per `PunctuationState`. With `PunctuationConfig.half_width_punc_after_latin_or_number`, `.` and `,` stay half width after a Latin letter or a digit, and `cancel_last` undoes that.
- `hanzikit.pinyinlookup`: `PinyinLookup` reads a binary reading table and returns readings with tone marks.
- `hanzikit.stroke`: `Stroke` reads `<strokes> <hanzi>` lines. `lookup` finds close matches and allows one deletion, insertion, substitution or transposition. `reverse_lookup` and `pretty_string` are also provided.
- `hanzikit.pinyinhelper`: `PinyinHelper` combines the two tables. `lookup_stroke` accepts digits `1`–`5` or the letters `h s p n z`, and `duyin_candidates` describes the readings of a text.
- `hanzikit.cloudpinyin`, `hanzikit.fetch` and `hanzikit.lrucache`: cloud pinyin requests to the Google, Google CN or Baidu endpoints, made in background threads. Results are cached in an LRU cache, and after 10 failed requests the client stops asking for 5 minutes.
- `hanzikit.scel`: `read_scel` reads `.scel` word lists, and `format_entry` writes an entry as a text line.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Converting a .scel word list

```
scel2org words.scel -o words.txt
```

Each entry is written as `word<TAB>pin'yin<TAB>0`. Without `-o`, or with `-o -`, the output goes to standard output. The three descriptions in the file are printed to standard error. `-d` also prints the words of the deletion table to standard error, as `DEL:<word>` lines. `-h` shows the help.

## Library examples

```python
from hanzikit.fullwidth import to_fullwidth
print(to_fullwidth("abc 123!"))    # ａｂｃ １２３！  (the space is kept)

from hanzikit.stroke import Stroke
stroke = Stroke(None)
stroke.load_lines(["12 十"])
print(stroke.lookup("12", 5))      # [('十', '12')]
print(stroke.pretty_string("12"))  # 一丨

from hanzikit.lrucache import LRUCache
cache = LRUCache(2)
cache.insert("ni", "你")
print(cache.find("ni"))            # 你
```

## What it does not do

- `ChttransEngine.OPENCC` exists, but the package has no OpenCC backend. Conversion works only through `NativeBackend` or a `ChttransBackend` subclass that you supply.
- The package does not connect to an input method framework. Key events, commits and surrounding text are passed in as plain values, and the results come back as return values.
- The package does not read configuration files from standard locations. You pass tables, profile directories and settings in explicitly. No data tables are bundled.