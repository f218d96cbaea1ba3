#!/usr/bin/env python
#
# This is a demo application to demonstrate the functionality of the clocktower controllers
#
# It can be ran standalone like this:
# python demo.py [Listener-IP]
#
# This will run the example on http://Listener-Ip:5000
#
# - A database is created and some authors and books are added
# - The CRUD api is available on /api/authors and /api/books
# - Send an "X-User: admin" header to delete books
#
import sys
from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy
from marshmallow import fields
from clocktower import ClocktowerAPI, ClocktowerBase, APIController, Transformer, Include, Policy, gate

db = SQLAlchemy()


# Example sqla database objects
class Author(ClocktowerBase, db.Model):
    """
    description: Author description
    """

    __tablename__ = "authors"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    books = db.relationship("Book", back_populates="author")


class Book(ClocktowerBase, db.Model):
    """
    description: Book description
    """

    __tablename__ = "books"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), default="")
    published = db.Column(db.Boolean, default=False)
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"))
    author = db.relationship("Author", back_populates="books")


class AuthorTransformer(Transformer):
    id = fields.Integer()
    name = fields.String()
    books = Include(lambda: BookTransformer, many=True)


class BookTransformer(Transformer):
    id = fields.Integer()
    title = fields.String()
    published = fields.Boolean()
    author = Include(lambda: AuthorTransformer)


@gate.policy(Book)
class BookPolicy(Policy):
    def delete(self, user, book):
        return user == "admin"


class AuthorController(APIController):
    model = Author
    transformer = AuthorTransformer
    validation_rules = {"name": "required|string|max:50"}
    update_validation_rules = {"name": "sometimes|string|max:50"}


class BookController(APIController):
    model = Book
    transformer = BookTransformer
    policy = ("delete",)
    show_includes = ["author"]
    store_validation_rules = {"title": "required|string|max:255", "author_id": "required|integer"}

    def store_after_fill(self, model):
        model.title = model.title.strip()


def create_app():
    app = Flask("Clocktower Demo Application")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://", DEBUG=True)
    db.init_app(app)

    @app.before_request
    def load_user():
        # a real application sets the authenticated user here
        g.user = request.headers.get("X-User")

    with app.app_context():
        db.create_all()
        herbert = Author(name="Frank Herbert")
        db.session.add(herbert)
        db.session.flush()
        db.session.add_all([Book(title="Dune", author_id=herbert.id, published=True), Book(title="Dune Messiah", author_id=herbert.id)])
        db.session.commit()

        api = ClocktowerAPI(app, prefix="/api")
        api.expose(AuthorController, BookController)

    return app


if __name__ == "__main__":
    HOST = sys.argv[1] if len(sys.argv) > 1 else "0.0.0.0"
    PORT = 5000
    app = create_app()
    print(f"Starting API: http://{HOST}:{PORT}/api/books?include=author")
    app.run(host=HOST, port=PORT)
