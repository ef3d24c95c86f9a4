""" Example: compile the documented condition use cases and print the queries. """
import json

from workflow_builder.conditions.models import parse_conditions
from workflow_builder.query.assembler import assemble
from workflow_builder.telemetry import configure_logging

USE_CASES = {
    "Contacts with point_balance > 1000": [
        {"id": "cond-1", "collection": "contacts", "field": "point_balance",
         "field_type": "number", "operator": "greater_than", "value": 1000},
    ],
    "High-spending customers (orders.net_amount > 20000)": [
        {"id": "cond-2", "collection": "orders", "field": "net_amount",
         "field_type": "number", "operator": "greater_than", "value": 20000},
    ],
    "Male customers with expiring points": [
        {"id": "cond-3", "collection": "contacts", "field": "gender", "field_type": "select",
         "operator": "greater_than", "value": "male", "select_options": ["male", "female", "other"]},
        {"id": "cond-4", "collection": "point_histories", "field": "expire_date", "field_type": "date",
         "operator": "date_after", "value": "today", "logical_operator": "AND", "date_type": "today"},
    ],
    "Birthday anniversary": [
        {"id": "cond-5", "collection": "contacts", "field": "date_of_birth", "field_type": "date",
         "operator": "equals", "value": "anniversary", "date_type": "anniversary"},
    ],
}


def main():
    configure_logging()
    for title, raw in USE_CASES.items():
        print(f"\n--- {title} ---")
        print(json.dumps(assemble(parse_conditions(raw)), indent=2))


if __name__ == '__main__':
    main()
