"""Example using an explicit Client with JSON values and the streaming reader."""

from replitdb import Client, DatabaseMapping


def main() -> None:
    """Store a JSON document, read it back, and browse keys through a mapping."""
    with Client.from_environment() as client:
        client.set_json("user:alice", {"age": 30, "roles": ["admin"]})
        print("user:", client.get_json("user:alice"))

        with client.get_reader("user:alice") as reader:
            print("raw bytes:", reader.read())

        users = DatabaseMapping(client, prefix="user:")
        users["bob"] = "plain text value"
        print(f"{users.to_dict()=}")

        for name in list(users):
            del users[name]


if __name__ == "__main__":
    main()
