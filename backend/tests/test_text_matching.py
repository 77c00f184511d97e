from app.utils.text_matching import fold_turkish, normalize_query


def test_fold_turkish_letters():
    assert fold_turkish("ğüşöçı") == "gusoci"
    assert fold_turkish("ĞÜŞÖÇİI") == "gusocii"


def test_fold_keeps_other_characters():
    assert fold_turkish("Köfte 2 adet!") == "Kofte 2 adet!"
    assert fold_turkish("") == ""


def test_normalize_query():
    assert normalize_query("  Bu AY   Toplam GELİR? ") == "bu ay toplam gelir?"
    assert normalize_query("Geçen\thafta\nÇİROSU") == "gecen hafta cirosu"
    assert normalize_query(None) == ""
