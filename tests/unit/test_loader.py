import gzip
import math

import pandas as pd
import pytest

from coinsdash.data.errors import IngestionError
from coinsdash.data.loader import display_name_for, load_batch, load_paths, load_upload
from coinsdash.data.normalize import describe_missing, normalize_frame, resolve_columns


# ---------------------------------------------------------------------------
# Header aliases
# ---------------------------------------------------------------------------

def test_aliases_resolve_case_and_space_insensitively():
    resolved = resolve_columns(["User ID ", "AMOUNT", "Action Type", "Epoch"])

    assert resolved == {
        "pk": "User ID ",
        "coins": "AMOUNT",
        "action": "Action Type",
        "timestamp": "Epoch",
    }


def test_first_listed_alias_wins():
    assert resolve_columns(["sk", "pk", "coins", "action"])["pk"] == "pk"


def test_missing_fields_message_names_aliases():
    msg = describe_missing(["coins", "action"])

    assert msg == ("Missing required fields: coins (coins/coin/amount/value), "
                   "action (action/type/event/actiontype)")


def test_normalize_coerces_values():
    raw = pd.DataFrame({
        "id": [" u1 ", "u2"],
        "coin": ["12.5", "abc"],
        "event": ["buy_gift", "redeem_bonus"],
        "ts": ["1700000000", "soon"],
    })

    df = normalize_frame(raw, "x.csv")

    assert list(df.columns) == ["user_id", "coins", "action", "timestamp"]
    assert list(df["user_id"]) == ["u1", "u2"]
    assert list(df["coins"]) == [12.5, 0.0]
    assert df["timestamp"].iloc[0] == 1_700_000_000.0
    assert math.isnan(df["timestamp"].iloc[1])


def test_normalize_without_timestamp_column():
    raw = pd.DataFrame({"pk": ["u1"], "coins": ["1"], "action": ["buy_gift"]})

    df = normalize_frame(raw, "x.csv")

    assert df["timestamp"].isna().all()


def test_blank_user_id_rejects_file():
    raw = pd.DataFrame({"pk": ["u1", ""], "coins": ["1", "2"], "action": ["a", "b"]})

    with pytest.raises(IngestionError) as exc:
        normalize_frame(raw, "bad.csv")

    assert exc.value.filename == "bad.csv"
    assert "'pk'" in exc.value.message
    assert "line 3" in exc.value.message


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def test_display_name_strips_extension():
    assert display_name_for("Coins - US.csv") == "Coins - US"
    assert display_name_for("week.1.xlsx") == "week.1"


def test_load_csv(csv):
    loaded = load_upload("Coins - US.csv", csv("PK,Coins,Action,Timestamp", "u1,10,buy_gift,60", "u2,5,redeem_bonus,"))

    assert loaded.name == "Coins - US"
    assert len(loaded.records) == 2
    assert loaded.records["coins"].sum() == 15.0


def test_load_csv_in_small_chunks_matches(csv):
    content = csv("pk,coins,action", *[f"u{i},{i},buy_gift" for i in range(25)])

    small = load_upload("a.csv", content, chunk_size=4).records
    whole = load_upload("a.csv", content, chunk_size=1_000).records

    pd.testing.assert_frame_equal(small, whole)


def test_load_gzip_csv(csv):
    content = gzip.compress(csv("pk,coins,action", "u1,3,buy_gift"))

    loaded = load_upload("daily.csv.gz", content)

    assert loaded.name == "daily"
    assert loaded.filename == "daily.csv"


def test_load_xlsx(xlsx):
    content = xlsx(pd.DataFrame({"userid": ["u1", "u2"], "amount": [7, 3], "type": ["buy_gift", "buy_gift"]}))

    loaded = load_upload("book.xlsx", content)

    assert list(loaded.records["user_id"]) == ["u1", "u2"]
    assert list(loaded.records["coins"]) == [7.0, 3.0]


@pytest.mark.parametrize("filename,content,fragment", [
    ("notes.txt", b"pk,coins,action\nu1,1,a\n", "Only .xlsx or .csv"),
    ("empty.csv", b"", "empty"),
    ("header_only.csv", b"pk,coins,action\n", "no data rows"),
    ("wrong.csv", b"name,total\nx,1\n", "Missing required fields"),
    ("broken.xlsx", b"not a zip", "Could not read workbook"),
])
def test_bad_files_raise_ingestion_error(filename, content, fragment):
    with pytest.raises(IngestionError) as exc:
        load_upload(filename, content)

    assert fragment in exc.value.message


def test_batch_isolates_bad_files(csv):
    result = load_batch([
        ("good.csv", csv("pk,coins,action", "u1,1,buy_gift")),
        ("bad.csv", csv("who,what", "x,y")),
        ("also_good.csv", csv("id,value,event", "u2,2,buy_gift")),
    ])

    assert [f.name for f in result.loaded] == ["good", "also_good"]
    assert [e["file"] for e in result.errors] == ["bad.csv"]
    assert result.ok is False


def test_load_paths_reports_missing_files(tmp_path, csv):
    good = tmp_path / "good.csv"
    good.write_bytes(csv("pk,coins,action", "u1,1,buy_gift"))

    result = load_paths([good, tmp_path / "gone.csv"])

    assert [f.name for f in result.loaded] == ["good"]
    assert result.errors == [{"file": "gone.csv", "error": "File not found"}]
