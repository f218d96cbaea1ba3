import pytest
import clocktower.controller as controller_module
from clocktower import ClocktowerAPI, Gate
from sample_app import create_app, db, Author, Book, BookPolicy
from sample_app import AuthorController, BookController, ReadOnlyBookController


@pytest.fixture
def app():
    app = create_app()
    with app.app_context():
        api = ClocktowerAPI(app, prefix="/api", app_db=db)
        api.expose(AuthorController, BookController)
        api.expose_controller(ReadOnlyBookController, url="library/books")
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def gate(monkeypatch: pytest.MonkeyPatch) -> Gate:
    """
    every test gets its own policy gate
    """
    test_gate = Gate()
    test_gate.policy(Book, BookPolicy)
    monkeypatch.setattr(controller_module, "default_gate", test_gate)
    return test_gate


@pytest.fixture
def books(app):
    """
    two authors, three books
    """
    herbert = Author(name="Frank Herbert")
    le_guin = Author(name="Ursula K. Le Guin")
    db.session.add_all([herbert, le_guin])
    db.session.flush()
    db.session.add_all(
        [
            Book(title="Dune", author_id=herbert.id, published=True),
            Book(title="Dune Messiah", author_id=herbert.id),
            Book(title="The Dispossessed", author_id=le_guin.id, published=True),
        ]
    )
    db.session.commit()
    return db.session.query(Book).order_by(Book.id).all()
