# enscan

`enscan` is a Python library that gathers publicly listed information about a
company from Chinese business-registry sites and writes it out as an Excel
workbook or as JSON.

Given a company name (or a company ID), it looks the company up, picks the
first match and collects, as requested:

- basic enterprise information (legal person, status, capital, address, credit code)
- ICP website records
- mobile apps
- WeChat official accounts and Weibo accounts
- job postings and software copyrights
- suppliers, shareholders, branches, holdings and outward investments,
  optionally followed several levels deep

Two sources are included, `enscan.sources.aiqicha.AiQiCha` and
`enscan.sources.kuaicha.KuaiCha`, plus the plug-in `enscan.sources.miit.Miit`,
which looks up ICP, app and mini-program records by company name through an
ICP query service whose address you configure.

## Installation

```
pip install .
```

Python 3.10 or newer is required. The package depends on `requests`,
`pyyaml` and `tabulate`.

## Configuration

Most sources need a logged-in browser cookie, read from a YAML file.
`enscan.config.write_default_config(path)` writes a template, and
`enscan.config.default_config_path()` gives the default location
(`config.yaml` next to the running program). Fill in the values for the
sources you use:

```yaml
version: 0.5
app:
  miit_api: 'http://localhost:16181'
cookies:
  aiqicha: 'placeholder'
  kuaicha: 'placeholder'
```

`ENConfig.from_yaml(text)` reads such text; unknown keys are ignored. A file
whose `version` is older than 0.5 is rejected by `parse_options` with a
`ConfigError`.

## Usage

```python
from enscan.config import ENOptions
from enscan.options import parse_options
from enscan.sources.aiqicha import AiQiCha
from enscan.collect import advance_filter, get_info_by_id
from enscan.output import info_to_map, out_file_by_en_info

options = parse_options(
    ENOptions(keyword="Example Technology Co", get_flags="icp,app"),
    config_path="config.yaml",
)
job = AiQiCha(options)
pid = advance_filter(job)                       # "" when nothing matches
data = get_info_by_id(pid, options.get_field, job)
rows = info_to_map(data, job.get_en_map(), "aqc")
path = out_file_by_en_info(rows, options.keyword, options.out_put_type, options.output)
```

`parse_options` fills in defaults and checks the options: the output directory
defaults to `outs`, `get_flags` (comma separated, or `all`) selects the kinds
of information, and `invest_num`, `is_hold`, `is_supplier`, `is_get_branch`
and `is_search_branch` add investments and shareholders, holdings, suppliers
and branches. It raises `ConfigError` when the configuration or the options
cannot be used, and exits with status 0 when `version` is set (writing the
configuration template if it is missing) or when there is nothing to search
for.

`get_info_by_id` follows investments of at least `invest_num` percent for
`deep` levels, and walks holdings, suppliers and (with `is_search_branch`)
branches one level. Companies whose name matches the regular expression in
`branch_filter` are skipped.

To add the plug-in's results, pass the unified rows to it:

```python
from enscan.collect import get_app_by_id
from enscan.sources.miit import Miit
from enscan.utils import merge_map

app = Miit(options)
extra = info_to_map(get_app_by_id(rows, options.get_field, app), app.get_en_map(), "miit")
merge_map(extra, rows)
```

### Flags

`enscan.options.parse_args(argv)` prints a banner and reads command-line style
flags into an `ENOptions`; each flag takes one or two dashes, and boolean
flags also accept `-flag=true` / `-flag=false`.

| Flag | Option field |
| --- | --- |
| `-n` | `keyword`, company name |
| `-i` | `company_id` |
| `-f` | `input_file`, names or IDs one per line |
| `-type` | `scan_type`, comma separated, or `all` |
| `-field` | `get_flags`, comma separated, or `all` |
| `-invest` | `invest_num`, minimum share in percent |
| `-deep` | `deep`, levels of investments (default 1) |
| `-hold` / `-supplier` / `-branch` / `-is-branch` | holdings, suppliers, branches |
| `-branch-filter` | `branch_filter`, regular expression |
| `-out-dir` | `output` (`!` writes no file) |
| `-out-type` / `-json` | `out_put_type`, `xlsx` or `json` |
| `-delay` | `delay_time`, seconds before each request; `-1` is random 1–5 s |
| `-timeout` | `timeout`, minutes (default 1) |
| `-proxy` | `proxy` URL |
| `-debug` | show debug messages |
| `-v` | `version` |

Requests are sent with certificate checks turned off; connection failures are
retried after a pause until they succeed, and an unsuccessful HTTP status is
logged and treated as an empty answer.

## Output

`out_file_by_en_info(data, name, file_type, out_dir)` creates `out_dir` if
needed and writes `<name>-<YYYY-MM-DD>--<unix time>.<file_type>`, the name cut
to 20 characters. An `xlsx` file has one sheet per kind of information (written
by `enscan.excel.Workbook`); a `json` file maps each kind to a list of records.
Every record carries `from` (the company it was reached through) and `extra`.
The directory `!` writes nothing and returns `None`; other failures raise
`OutputError`. `out_str_by_en_info(data, kind)` gives one kind as
comma-separated lines.

Messages go through `enscan.log`; `log.DEFAULT_LOGGER.set_max_level(Level.DEBUG)`
shows debug output, and a fatal message exits with status 1.

## What this package does not do

- It installs no command; flags are parsed only through `parse_args` from Python.
- It does not batch-process an input file or run sources in parallel; call the
  functions above for each company yourself.
- It runs no HTTP API server; the `-api` and `-mcp` flags only set fields on
  the options.
- It has no Tianyancha source; `aqc` and `kc` are the only sources included.

## Use responsibly

Collect only information you are entitled to, and respect the terms of the
sites you query.