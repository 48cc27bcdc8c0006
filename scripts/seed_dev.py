from sqlalchemy.orm import sessionmaker
from rafflewin.db.engine import make_engine
from rafflewin.models import DISCOVERY_70, DISCOVERY_80, Base, Contestant

SAMPLE_ROSTER = {
    DISCOVERY_70: [
        ("Alice Tan", "Engineering", "M. Ito", 10),
        ("Bruno Silva", "Engineering", "M. Ito", 5),
        ("Chen Wei", "Operations", "R. Diaz", 5),
        ("Dana Novak", "Finance", "K. Okafor", 3),
        ("Eli Haddad", "Operations", "R. Diaz", 1),
    ],
    DISCOVERY_80: [
        ("Farah Khan", "Sales", "J. Moreau", 8),
        ("Gustavo Ruiz", "Sales", "J. Moreau", 4),
        ("Hana Sato", "Support", "L. Berg", 6),
        ("Ivan Petrov", "Support", "L. Berg", 2),
    ],
}


def main() -> None:
    """Reset the development database and load a sample roster for each pool."""
    engine = make_engine()
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    with Session.begin() as session:
        for draw_type, rows in SAMPLE_ROSTER.items():
            session.add_all(
                Contestant(
                    name=name,
                    department=department,
                    supervisor=supervisor,
                    tickets=tickets,
                    draw_type=draw_type,
                )
                for name, department, supervisor, tickets in rows
            )

    total = sum(len(rows) for rows in SAMPLE_ROSTER.values())
    print(f"Seeded {total} contestants across {len(SAMPLE_ROSTER)} pools.")


if __name__ == "__main__":
    main()
