"""Pull coupon fields out of the markdown returned by the ``my-coupons`` tool.

The remote answers with loosely formatted markdown, one ``## `` heading per
coupon followed by bullet lines such as ``- **有效期**: ...``. This is plain
prefix matching, not a markdown parser.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

TITLE_PREFIX = "## "
PRICE_PREFIX = "- **优惠**:"
EXPIRY_PREFIX = "- **有效期**:"
RECEIVE_TIME_PREFIX = "- **领取时间**:"
TAGS_PREFIX = "- **标签**:"
IMAGE_PREFIX = "<img"
IMAGE_SRC = 'src="'

# Document heading and the "共 N 张" total line carry no coupon data.
_SKIPPED_PREFIXES = ("# ", "共 ")


class Coupon(BaseModel):
    title: str
    price: str = ""
    expiry: str = ""
    receive_time: str = ""
    tags: str = ""
    image_url: str = ""


_FIELD_PREFIXES = (
    (PRICE_PREFIX, "price"),
    (EXPIRY_PREFIX, "expiry"),
    (RECEIVE_TIME_PREFIX, "receive_time"),
    (TAGS_PREFIX, "tags"),
)


def _image_src(line: str) -> str | None:
    start = line.find(IMAGE_SRC)
    if start == -1:
        return None
    rest = line[start + len(IMAGE_SRC) :]
    end = rest.find('"')
    if end == -1:
        return None
    return rest[:end]


def parse_coupons_from_markdown(text: str) -> List[Coupon]:
    coupons: List[Coupon] = []
    current: Coupon | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(_SKIPPED_PREFIXES):
            continue

        if line.startswith(TITLE_PREFIX):
            if current is not None:
                coupons.append(current)
            current = Coupon(title=line[len(TITLE_PREFIX) :])
            continue

        if current is None:
            continue

        for prefix, field in _FIELD_PREFIXES:
            if line.startswith(prefix):
                setattr(current, field, line[len(prefix) :].strip())
                break
        else:
            if line.startswith(IMAGE_PREFIX):
                src = _image_src(line)
                if src is not None:
                    current.image_url = src

    if current is not None:
        coupons.append(current)
    return coupons
