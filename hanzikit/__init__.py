"""Chinese text utilities: script conversion, full width text, punctuation, pinyin, strokes, cloud pinyin and .scel reading."""

__version__ = "0.1.0"