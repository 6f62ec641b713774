# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Interactive walkthrough of the PocketBase client against a running server.

Expects an ``articles`` collection with a ``title`` (text) and ``published``
(bool) field, and a ``users`` auth collection.
"""

import sys
from dataclasses import dataclass

from pocketbase import NotFoundError, PocketBase, PocketBaseError


@dataclass
class Article:
    id: str
    title: str
    published: bool = False


def log_call(call: str) -> None:
    print({"call": call})


entered = input("Enter PocketBase URL (e.g. http://127.0.0.1:8090): ").strip()
if not entered:
    print("No URL entered; exiting.")
    sys.exit(1)

email = input("User email: ").strip()
password = input("User password: ").strip()
delete_choice = input("Delete the created records at end? (Y/n): ").strip() or "y"
cleanup = delete_choice.lower() in ("y", "yes", "true", "1")

with PocketBase(entered) as pb:
    try:
        log_call("users.auth_with_password")
        store = pb.collection("users").auth_with_password(email, password)
        print({"authenticated_as": store.record.email, "collection": store.record.collection_name})
    except PocketBaseError as ex:
        print({"auth_failed": ex.to_dict()})
        sys.exit(1)

    articles = pb.collection("articles")
    created = []
    for i in range(3):
        log_call(f"articles.create #{i}")
        meta = articles.create({"title": f"Quickstart article {i}", "published": i % 2 == 0})
        created.append(meta.id)
        print({"created": meta.id, "at": meta.created})

    log_call("articles.update")
    articles.update(created[0], {"title": "Quickstart article 0 (edited)"})

    log_call("articles.get_one")
    article = articles.get_one(created[0], model=Article).execute()
    print({"get_one": article})

    log_call("articles.get_list")
    page = articles.get_list(model=Article).per_page(2).sort("-created").filter('title ~ "Quickstart"').execute()
    print({"page": page.page, "total_items": page.total_items, "titles": [a.title for a in page]})

    log_call("articles.get_first_list_item")
    first = articles.get_first_list_item().filter("published = true").sort("created").execute()
    print({"first_published": first["id"]})

    log_call("articles.get_full_list")
    everything = articles.get_full_list(model=Article).batch_size(100).filter('title ~ "Quickstart"').execute()
    print({"full_list_count": len(everything)})

    log_call("users.auth_refresh")
    pb.collection("users").auth_refresh()

    if cleanup:
        for record_id in created:
            log_call(f"articles.delete {record_id}")
            articles.delete(record_id)
        try:
            articles.get_one(created[0]).execute()
        except NotFoundError:
            print({"deleted": len(created)})
