#!/usr/bin/env python

"""
    Member store for Biblio.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from biblio.models import Member, MemberStatus, Loan
from biblio.core.exceptions import (
    MemberNotFoundError,
    MemberExistsError,
    InUseError,
)

MEMBER_FIELDS = ('name', 'email', 'phone', 'address', 'status')


class Members:

    # FOR KEY SHARE: blocks a delete of the member, not other checkouts
    SHARE = {'read': True, 'key_share': True}

    @classmethod
    def get_member(cls, session, member_id, lock=False):
        """`lock` is False, True for FOR UPDATE, or `Members.SHARE`."""
        member = session.get(
            Member, member_id,
            with_for_update=lock or None,
            populate_existing=bool(lock),
        )
        if member is None:
            raise MemberNotFoundError(f"Member {member_id} not found")
        return member

    @classmethod
    def list_members(cls, session, offset=None, limit=None):
        return session.scalars(
            select(Member).order_by(Member.id).offset(offset).limit(limit)).all()

    @classmethod
    def _check_email(cls, session, email, member_id=None):
        query = select(Member.id).where(Member.email == email)
        if member_id is not None:
            query = query.where(Member.id != member_id)
        if session.scalar(query) is not None:
            raise MemberExistsError(f"A member with email {email} already exists")

    @classmethod
    def create_member(cls, session, name, email, phone, address,
                      status=MemberStatus.ACTIVE):
        cls._check_email(session, email)
        member = Member(
            name=name, email=email, phone=phone, address=address,
            status=MemberStatus(status))
        session.add(member)
        try:
            session.flush()
        except IntegrityError as e:
            raise MemberExistsError(f"A member with email {email} already exists") from e
        session.refresh(member)
        return member

    @classmethod
    def update_member(cls, session, member_id, **fields):
        member = cls.get_member(session, member_id)
        if fields.get('email') and fields['email'] != member.email:
            cls._check_email(session, fields['email'], member_id)
        for name, value in fields.items():
            if name not in MEMBER_FIELDS:
                raise TypeError(f"Unknown member field: {name}")
            if name == 'status':
                value = MemberStatus(value)
            setattr(member, name, value)
        session.flush()
        return member

    @classmethod
    def has_loans(cls, session, member_id):
        return session.scalar(
            select(func.count(Loan.id)).where(Loan.member_id == member_id)) > 0

    @classmethod
    def delete_member(cls, session, member_id):
        """Deletes a member unless any loan, returned or not, names them."""
        member = cls.get_member(session, member_id, lock=True)
        if cls.has_loans(session, member_id):
            raise InUseError("Member has loan history and cannot be deleted")
        session.delete(member)
        session.flush()
        return True
