import pytest

from app.services.intent_detector import Intent, detect_intent, extract_top_n
from app.utils.text_matching import normalize_query


@pytest.mark.parametrize(
    "sentence,expected",
    [
        ("En son veri ne zaman girildi?", Intent.LATEST),
        ("Bu ay toplam gelir ne kadar?", Intent.SUMMARY),
        ("Geçen hafta ortalama sepet", Intent.SUMMARY),
        ("En çok satan ürünler hangileri?", Intent.TOP_ITEMS),
        ("Top 3 ürün", Intent.TOP_ITEMS),
        ("Kategori bazında satışlar", Intent.MENU_GROUP),
        ("Menü grubu dağılımı", Intent.MENU_GROUP),
        ("Paket ve yerinde sipariş oranı", Intent.SERVICE_TYPE),
        ("Merhaba, nasılsın?", Intent.NONE),
    ],
)
def test_detect_intent(sentence, expected):
    assert detect_intent(normalize_query(sentence)).intent is expected


def test_latest_wins_over_summary():
    match = detect_intent(normalize_query("En son günün toplam geliri nedir?"))
    assert match.intent is Intent.LATEST


def test_summary_wins_over_top_items():
    assert detect_intent("en cok satanlarin toplam geliri").intent is Intent.SUMMARY


def test_no_match_is_not_matched():
    match = detect_intent("gunlere gore siparis adedi")
    assert not match.matched
    assert match.top_n is None


@pytest.mark.parametrize(
    "sentence,expected",
    [
        ("top 3 urun", 3),
        ("top10", 10),
        ("en cok satan urunler", 5),
        ("top 50", 20),
        ("top 0", 1),
    ],
)
def test_extract_top_n(sentence, expected):
    assert extract_top_n(sentence) == expected


def test_top_n_only_set_for_top_items():
    assert detect_intent("top 7 urun").top_n == 7
    assert detect_intent("bu ay ciro").top_n is None
