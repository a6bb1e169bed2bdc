"""Minimal example for the module-level functions backed by the shared client."""

import replitdb


def main() -> None:
    """Run a set/get/list/delete flow against the database named by REPLIT_DB_URL."""
    replitdb.set("key", "value")
    print("key:", replitdb.get("key"))

    for index in range(3):
        replitdb.set(f"example-{index}", str(index))
    print("keys:", replitdb.list_keys("example-"))

    for key in replitdb.list_keys("example-"):
        replitdb.delete(key)
    replitdb.delete("key")

    try:
        replitdb.get("key")
    except replitdb.KeyNotFoundError as error:
        print("after delete:", error)


if __name__ == "__main__":
    main()
