# tests/test_cli.py

import json


def test_upload_command_sends_spreadsheet(app, fake_storage, tmp_path):
    path = tmp_path / 'june.csv'
    path.write_text('DBA,Volume,Residuals\nStore A,"$1,000",(5)\n')

    result = app.test_cli_runner().invoke(args=['upload', str(path), '--month', '2025/6'])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {'upload_id': 'c0ffee', 'locations_upserted': 2}
    assert fake_storage.calls[0]['filename'] == 'june.csv'
    assert fake_storage.calls[0]['volumes'] == [1000.0]
    assert fake_storage.calls[0]['agent_nets'] == [-5.0]


def test_upload_command_reports_errors(app, fake_storage, tmp_path):
    path = tmp_path / 'june.csv'
    path.write_text('DBA,Volume\nStore A,10\n')

    result = app.test_cli_runner().invoke(args=['upload', str(path), '--month', '2025-13'])

    assert result.exit_code != 0
    assert 'Invalid month: use 01-12' in result.output
    assert fake_storage.calls == []


def test_diagnose_command_without_configuration(app):
    app.config['SUPABASE_URL'] = None

    result = app.test_cli_runner().invoke(args=['diagnose'])

    assert result.exit_code == 0
    report = json.loads(result.output)
    assert report['hasUrl'] is False
    assert report['dbOk'] is False
