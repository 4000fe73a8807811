from slug import DEFAULT_SLUG, generate_slug, generate_unique_slug


def test_generate_slug_lowercases_and_hyphenates():
    assert generate_slug("  Industrial LED   Panel ") == "industrial-led-panel"


def test_generate_slug_transliterates_accents():
    assert generate_slug("Café Déluxe!") == "cafe-deluxe"


def test_generate_slug_falls_back_when_nothing_sluggable():
    assert generate_slug("!!!") == DEFAULT_SLUG
    assert generate_slug("") == DEFAULT_SLUG


def test_unique_slug_returns_base_when_free():
    assert generate_unique_slug("lamp", ["desk", "chair"]) == "lamp"


def test_unique_slug_appends_first_free_counter():
    assert generate_unique_slug("lamp", ["lamp"]) == "lamp-1"
    assert generate_unique_slug("lamp", ["lamp", "lamp-1", "lamp-2"]) == "lamp-3"


def test_unique_slug_fills_gaps():
    assert generate_unique_slug("lamp", ["lamp", "lamp-2"]) == "lamp-1"
