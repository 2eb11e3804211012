"""Reward ledger: request, supervisor pricing, redemption."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import NOW, make_account, make_supervised_pair
from tq.config import get_settings
from tq.errors import Forbidden, InsufficientBalance, InvalidState, NotFound, TooManyActive
from tq.rewards.ledger import (
    APPROVED,
    PENDING,
    REDEEMED,
    delete_reward,
    list_rewards,
    redeem_reward,
    request_reward,
    set_reward_cost,
)


class TestRequestReward:
    @pytest.mark.asyncio
    async def test_new_request_is_pending_and_free(self, db_session):
        account = await make_account(db_session)
        reward = await request_reward(db_session, account.id, "Cinema", "leisure", now=NOW)
        await db_session.commit()

        assert reward.status == PENDING
        assert reward.cost == 0
        assert reward.owner_id == account.id
        assert reward.created_at == NOW

    @pytest.mark.asyncio
    async def test_active_cap(self, db_session, monkeypatch):
        monkeypatch.setattr(get_settings(), "max_active_reward_requests", 2)
        account = await make_account(db_session)
        await request_reward(db_session, account.id, "One")
        await request_reward(db_session, account.id, "Two")
        with pytest.raises(TooManyActive):
            await request_reward(db_session, account.id, "Three")

    @pytest.mark.asyncio
    async def test_deleted_requests_free_the_cap(self, db_session, monkeypatch):
        monkeypatch.setattr(get_settings(), "max_active_reward_requests", 1)
        account = await make_account(db_session)
        first = await request_reward(db_session, account.id, "One")
        await delete_reward(db_session, account.id, first.id)
        second = await request_reward(db_session, account.id, "Two")
        assert second.id != first.id


class TestSetRewardCost:
    @pytest.mark.asyncio
    async def test_supervisor_prices_and_approves(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")

        priced = await set_reward_cost(db_session, supervisor, reward.id, 50, now=NOW)
        await db_session.commit()

        assert priced.status == APPROVED
        assert priced.cost == 50
        assert priced.approved_by_id == supervisor.id
        assert priced.approved_at == NOW

    @pytest.mark.asyncio
    async def test_approved_can_be_repriced(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 50)
        repriced = await set_reward_cost(db_session, supervisor, reward.id, 20)
        assert repriced.cost == 20
        assert repriced.status == APPROVED

    @pytest.mark.asyncio
    async def test_zero_cost_allowed(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Hug")
        priced = await set_reward_cost(db_session, supervisor, reward.id, 0)
        assert priced.status == APPROVED

    @pytest.mark.asyncio
    async def test_member_forbidden(self, db_session):
        member = await make_account(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")
        with pytest.raises(Forbidden):
            await set_reward_cost(db_session, member, reward.id, 10)

    @pytest.mark.asyncio
    async def test_negative_cost_rejected(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")
        with pytest.raises(InvalidState):
            await set_reward_cost(db_session, supervisor, reward.id, -1)

    @pytest.mark.asyncio
    async def test_unsupervised_owner_not_found(self, db_session):
        supervisor = await make_account(db_session, "Dr. Lima", role="supervisor")
        member = await make_account(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")
        with pytest.raises(NotFound):
            await set_reward_cost(db_session, supervisor, reward.id, 10)

    @pytest.mark.asyncio
    async def test_missing_reward_not_found(self, db_session):
        supervisor, _member = await make_supervised_pair(db_session)
        with pytest.raises(NotFound):
            await set_reward_cost(db_session, supervisor, 9999, 10)

    @pytest.mark.asyncio
    async def test_redeemed_cannot_be_repriced(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 0)
        await redeem_reward(db_session, member.id, reward.id, now=NOW)
        with pytest.raises(InvalidState):
            await set_reward_cost(db_session, supervisor, reward.id, 5)


class TestRedeemReward:
    @pytest.mark.asyncio
    async def test_redeem_debits_points(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        member.points = 80
        await db_session.commit()
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 50)

        result = await redeem_reward(db_session, member.id, reward.id, now=NOW)
        await db_session.commit()

        assert result.points_spent == 50
        assert result.balance == 30
        assert result.reward.status == REDEEMED
        assert result.reward.claimed_at == NOW
        assert member.points == 30

    @pytest.mark.asyncio
    async def test_first_redemption_unlocks_treat_yourself(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Tea")
        await set_reward_cost(db_session, supervisor, reward.id, 0)

        result = await redeem_reward(db_session, member.id, reward.id, now=NOW)

        assert result.badges.new_badges == ["treat_yourself"]
        assert member.experience == 10

    @pytest.mark.asyncio
    async def test_insufficient_balance_changes_nothing(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        member.points = 30
        await db_session.commit()
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 50)
        await db_session.commit()

        with pytest.raises(InsufficientBalance) as exc_info:
            await redeem_reward(db_session, member.id, reward.id, now=NOW)
        await db_session.rollback()

        assert exc_info.value.balance == 30
        assert exc_info.value.cost == 50
        await db_session.refresh(member)
        await db_session.refresh(reward)
        assert member.points == 30
        assert reward.status == APPROVED
        assert reward.claimed_at is None

    @pytest.mark.asyncio
    async def test_pending_cannot_be_redeemed(self, db_session):
        member = await make_account(db_session, points=100)
        reward = await request_reward(db_session, member.id, "Cinema")
        with pytest.raises(InvalidState):
            await redeem_reward(db_session, member.id, reward.id, now=NOW)

    @pytest.mark.asyncio
    async def test_double_redeem_rejected(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        member.points = 100
        await db_session.commit()
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 40)
        await redeem_reward(db_session, member.id, reward.id, now=NOW)

        with pytest.raises(InvalidState):
            await redeem_reward(db_session, member.id, reward.id, now=NOW + timedelta(seconds=1))
        assert member.points == 60

    @pytest.mark.asyncio
    async def test_someone_elses_reward_not_found(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        stranger = await make_account(db_session, "Bia", points=100)
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 10)
        with pytest.raises(NotFound):
            await redeem_reward(db_session, stranger.id, reward.id, now=NOW)

    @pytest.mark.asyncio
    async def test_deleted_reward_not_found(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 0)
        await delete_reward(db_session, member.id, reward.id)
        with pytest.raises(NotFound):
            await redeem_reward(db_session, member.id, reward.id, now=NOW)


class TestDeleteAndList:
    @pytest.mark.asyncio
    async def test_delete_redeemed_does_not_refund(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        member.points = 60
        await db_session.commit()
        reward = await request_reward(db_session, member.id, "Cinema")
        await set_reward_cost(db_session, supervisor, reward.id, 50)
        await redeem_reward(db_session, member.id, reward.id, now=NOW)

        await delete_reward(db_session, member.id, reward.id, now=NOW)

        assert member.points == 10

    @pytest.mark.asyncio
    async def test_list_filters_status_and_deleted(self, db_session):
        supervisor, member = await make_supervised_pair(db_session)
        pending = await request_reward(db_session, member.id, "Pending", now=NOW)
        approved = await request_reward(db_session, member.id, "Approved", now=NOW + timedelta(minutes=1))
        gone = await request_reward(db_session, member.id, "Gone", now=NOW + timedelta(minutes=2))
        await set_reward_cost(db_session, supervisor, approved.id, 5)
        await delete_reward(db_session, member.id, gone.id)

        everything = await list_rewards(db_session, member.id)
        assert [r.id for r in everything] == [approved.id, pending.id]

        only_approved = await list_rewards(db_session, member.id, status=APPROVED)
        assert [r.id for r in only_approved] == [approved.id]

    @pytest.mark.asyncio
    async def test_delete_other_accounts_reward_not_found(self, db_session):
        member = await make_account(db_session, "Ana")
        stranger = await make_account(db_session, "Bia")
        reward = await request_reward(db_session, member.id, "Cinema")
        with pytest.raises(NotFound):
            await delete_reward(db_session, stranger.id, reward.id)
