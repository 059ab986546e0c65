from workers.travel_extract.field_candidates import (
    dig,
    find_hotel_array,
    is_hotel_array,
    map_hotel_object,
)


def test_dig_follows_keys_and_indexes():
    obj = {"images": [{"url": "/a.jpg"}]}
    assert dig(obj, ("images", 0, "url")) == "/a.jpg"
    assert dig(obj, ("images", 3, "url")) is None
    assert dig(obj, ("missing", "x")) is None


def test_map_hotel_object_uses_first_matching_candidate():
    obj = {
        "propertyId": "P-9",
        "propertyName": "Casa  del Mar",
        "geo": {"lat": "25.79", "lng": -80.13},
        "address": {"line1": "1 Ocean Dr", "city": "Miami", "region": "FL", "country": "US"},
        "rating": {"stars": 4},
        "review": {"score": "8.9"},
        "lowestPrice": {"display": "$240"},
        "cancellationPolicy": {"short": "Free cancellation", "refundable": "yes"},
        "images": [{"url": "/img/p9.jpg"}],
        "slug": "casa-del-mar",
    }
    row = map_hotel_object(obj, "https://www.example.com/search")

    assert row["id"] == "P-9"
    assert row["name"] == "Casa del Mar"
    assert row["lat"] == 25.79
    assert row["lon"] == -80.13
    assert row["address"] == "1 Ocean Dr, Miami, FL, US"
    assert row["star_rating"] == 4
    assert row["review_score"] == "8.9"
    assert row["price_text"] == "$240"
    assert row["cancel_text"] == "Free cancellation"
    assert row["refundable"] is True
    assert row["image"] == "https://www.example.com/img/p9.jpg"
    assert row["detail_url"] == "https://www.example.com/hotels/casa-del-mar"


def test_map_hotel_object_skips_absent_fields():
    assert map_hotel_object({"name": "Solo"}) == {"name": "Solo"}
    assert map_hotel_object("not a dict") == {}


def test_is_hotel_array_needs_named_entries():
    assert is_hotel_array([{"name": "A"}, {"name": "B"}, {"price": 1}])
    assert not is_hotel_array([{"price": 1}, {"price": 2}])
    assert not is_hotel_array([])
    assert not is_hotel_array({"name": "A"})


def test_find_hotel_array_searches_by_shape():
    state = {"app": {"page": {"listing": {"items": [{"propertyName": "X"}, {"propertyName": "Y"}]}}}}
    assert find_hotel_array(state) == [{"propertyName": "X"}, {"propertyName": "Y"}]


def test_find_hotel_array_respects_depth():
    deep = {"a": {"b": {"c": {"d": {"e": {"f": {"g": [{"name": "Too deep"}]}}}}}}}
    assert find_hotel_array(deep, max_depth=3) is None
