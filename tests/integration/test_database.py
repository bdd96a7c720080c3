"""Integration tests for database models.

These tests verify the model layer against SQLite with foreign keys on:
- Users, forms, questions, responses and answers round trip
- Unique constraints
- Cascade delete from users and forms
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from formly.models.form import Form, Question
from formly.models.response import Answer, FormResponse
from formly.models.user import User
from formly.schemas.form import QuestionType


def count(db_session, model) -> int:
    return db_session.execute(select(func.count()).select_from(model)).scalar_one()


class TestUserModel:
    """Integration tests for User model."""

    def test_email_lookup_is_case_insensitive(self, db_session, make_user):
        """Test that users are found however the email is typed."""
        user = make_user("carol@example.com")

        assert User.get_by_email(db_session, "  Carol@Example.COM ") is user
        assert User.get_by_email(db_session, "nobody@example.com") is None

    def test_email_unique(self, db_session, make_user):
        make_user("dup@example.com")

        with pytest.raises(IntegrityError):
            make_user("dup@example.com")


class TestFormModels:
    """Integration tests for forms and questions."""

    def test_questions_ordered_by_position(self, db_session, alice):
        """Test that questions load in position order, not insert order."""
        form = Form(title="T", owner_id=alice.id, published=True)
        form.questions = [
            Question(text="second", type="text", position=1),
            Question(text="first", type="text", position=0),
        ]
        db_session.add(form)
        db_session.commit()
        db_session.expire_all()

        loaded = db_session.get(Form, form.id)

        assert [q.text for q in loaded.questions] == ["first", "second"]

    def test_position_unique_per_form(self, db_session, alice):
        form = Form(title="T", owner_id=alice.id)
        form.questions = [
            Question(text="a", type="text", position=0),
            Question(text="b", type="text", position=0),
        ]
        db_session.add(form)

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_options_stored_as_json(self, db_session, make_form, alice):
        form = make_form(alice)
        db_session.expire_all()

        question = db_session.get(Form, form.id).questions[1]

        assert question.options == ["Red", "Blue"]
        assert question.type == QuestionType.MULTIPLE_CHOICE.value

    def test_new_form_defaults_to_unpublished(self, db_session, alice):
        form = Form(title="Draft", owner_id=alice.id)
        db_session.add(form)
        db_session.commit()

        assert form.published is False
        assert form.is_owned_by(alice.id) is True
        assert form.is_owned_by(None) is False


class TestResponseModels:
    """Integration tests for responses and answers."""

    def test_one_answer_per_question(self, db_session, make_form, alice):
        form = make_form(alice)
        question_id = form.questions[0].id
        response = FormResponse(
            form_id=form.id,
            answers=[
                Answer(question_id=question_id, value="a"),
                Answer(question_id=question_id, value="b"),
            ],
        )
        db_session.add(response)

        with pytest.raises(IntegrityError):
            db_session.commit()


class TestCascadeDelete:
    """Integration tests for cascading deletes."""

    def _form_with_response(self, db_session, make_form, owner):
        form = make_form(owner)
        db_session.add(
            FormResponse(
                form_id=form.id,
                answers=[Answer(question_id=form.questions[0].id, value="x")],
            )
        )
        db_session.commit()
        return form

    def test_deleting_form_removes_children(self, db_session, make_form, alice):
        """Test that questions, responses and answers go with the form."""
        form = self._form_with_response(db_session, make_form, alice)

        db_session.delete(form)
        db_session.commit()

        assert count(db_session, Question) == 0
        assert count(db_session, FormResponse) == 0
        assert count(db_session, Answer) == 0

    def test_deleting_user_removes_forms(self, db_session, make_form, alice, bob):
        """Test that deleting a user leaves other users' data alone."""
        self._form_with_response(db_session, make_form, alice)
        self._form_with_response(db_session, make_form, bob)

        db_session.delete(alice)
        db_session.commit()

        assert count(db_session, Form) == 1
        assert count(db_session, FormResponse) == 1
        assert count(db_session, Answer) == 1
