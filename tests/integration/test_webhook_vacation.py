"""Registro e férias de ponta a ponta pelo webhook."""

from __future__ import annotations

from hr_bot.domain.enums import VacationStatus


def _post(client, payload: dict) -> None:
    response = client.post("/webhooks/telegram", json=payload)
    assert response.json() == {"ok": True}


def test_new_user_registers_then_approves_a_vacation(client, fake_telegram, make_update):
    hr_user = {"user_id": 3003, "chat_id": 3003}

    _post(client, make_update(1, text="/start", **hr_user))
    assert "реєстрація" in fake_telegram.texts_for(3003)[0]

    steps = ("reg_start", "reg_dep_4", "reg_team_4_0", "reg_pos_4_0_0")
    for update_id, data in enumerate(steps, 2):
        _post(client, make_update(update_id, callback_data=data, **hr_user))
    employee = client.app.state.directory.find(3003)
    assert employee is not None
    assert employee.can_approve

    _post(client, make_update(10, callback_data="vacation_days_2099-07-01_3"))
    (request,) = client.app.state.vacations.list_all()
    assert request.telegram_id == 1001

    approve = f"vacation_approve_{request.request_id}"
    _post(client, make_update(11, callback_data=approve, **hr_user))
    decided = client.app.state.vacations.get(request.request_id)
    assert decided.status is VacationStatus.APPROVED
    assert decided.decided_by == "Olena Koval"
    assert fake_telegram.texts_for(1001)[-1].startswith("✅ <b>Вашу заявку на відпустку")


def test_redelivered_decision_is_processed_once(client, fake_telegram, make_update, make_employee):
    _post(client, make_update(20, callback_data="vacation_days_2099-07-01_2"))
    (request,) = client.app.state.vacations.list_all()
    client.app.state.directory.register(
        make_employee(3003, full_name="Iryna", department="HR", team="HR", position="HR")
    )
    decision = make_update(
        21, callback_data=f"vacation_reject_{request.request_id}", user_id=3003, chat_id=3003
    )

    _post(client, decision)
    _post(client, decision)

    assert client.app.state.vacations.get(request.request_id).status is VacationStatus.REJECTED
    assert len(fake_telegram.texts_for(3003)) == 1
