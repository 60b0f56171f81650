"""
Request body for the device's ACS event search.
"""


def build_event_query(search_id, page_size, offset, start_date, end_date, tz_offset="+07:00"):
    """
    One page of the access-control event log between start_date 00:00:00
    and end_date 23:59:59 (local offset tz_offset).

    search_id must stay the same for every page of one search; the device
    keys its result cursor on it. major/minor 0 match every event type.
    """
    return {
        "AcsEventCond": {
            "searchID": search_id,
            "maxResults": page_size,
            "searchResultPosition": offset,
            "major": 0,
            "minor": 0,
            "startTime": f"{start_date}T00:00:00{tz_offset}",
            "endTime": f"{end_date}T23:59:59{tz_offset}",
        }
    }
