from domain.models import Attachment
from utils.media import encode_attachments, guess_mime_type, to_data_url


def test_data_url():
    att = Attachment(filename="a.png", mime_type="image/png", content=b"hi")
    assert to_data_url(att) == "data:image/png;base64,aGk="


def test_encode_keeps_order():
    atts = [
        Attachment(filename="a.png", mime_type="image/png", content=b"a"),
        Attachment(filename="b.mp4", mime_type="video/mp4", content=b"b"),
    ]
    assert [u.split(";")[0] for u in encode_attachments(atts)] == ["data:image/png", "data:video/mp4"]
    assert atts[1].is_video


def test_guess_mime_type():
    assert guess_mime_type("clip.mp4", "video/quicktime") == "video/quicktime"
    assert guess_mime_type("photo.jpg") == "image/jpeg"
    assert guess_mime_type("blob") == "application/octet-stream"
