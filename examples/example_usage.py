"""Example: drive the store and auth gate directly (no Flask).

Controllers are a thin layer; the business rules live in Store and AuthGate.
"""

import asyncio

from employee_portal.container import build_container
from employee_portal.storage.memory_storage import InMemoryStorage


def main():
    container = build_container(storage=InMemoryStorage(), verify_delay=0)
    gate = container.auth_gate

    gate.register("Jo", "Lee", "jo@x.com", "secret1")
    asyncio.run(gate.simulate_verify())
    gate.login("jo@x.com", "secret1")

    engineering = container.store.departments()[0]
    container.store.create_employee(user_email="jo@x.com", dept_id=engineering.dept_id, position="Developer")
    print(container.queries.employee_rows())


if __name__ == "__main__":
    main()
