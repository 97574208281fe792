# postureutils

A library of building blocks for tools that process the results of
Kubernetes security posture scans. It covers severities and scan statuses,
rule, control and framework reports, exception policies that waive
findings, and attack tracks that chain failed controls into attack paths.
It has no third-party dependencies.

## Installation

```
pip install postureutils
```

To install with the test dependencies:

```
pip install "postureutils[test]"
```

## What is inside

| Module | Purpose |
| --- | --- |
| `postureutils.severity` | `Severity`, and mapping a control's base score to a severity and its name |
| `postureutils.statuses` | `ScanningStatus`, `ScanningSubStatus`, `StatusMsg`, `StatusInfo`, and `compare`, `compare_status_and_sub_status` and `convert_status_to_new_status` |
| `postureutils.status` | A plain `Status` value, `new_status` and `new_status_info` |
| `postureutils.cloud` | `CloudProviderName`, and `GKEMetadata`, `EKSMetadata` and `AKSMetadata`, which split cluster names into prefix and short name |
| `postureutils.hashmap` | `hash_map`, an order-independent hash of a string-to-string mapping, and `field_mul64` |
| `postureutils.attacktrack` | `AttackTrack` trees, their validation and traversal, controls lookups and `AttackTrackAllPathsHandler` |
| `postureutils.httpapi` | `PostScanRequest` and `Response` payloads with `to_dict` / `from_dict`, `NotificationPolicyKind`, `ScanResponseType` |
| `postureutils.listing` | `AllLists`, which groups identifiers by status and removes duplicates |
| `postureutils.designators` | `PostureExceptionPolicy`, `PortalDesignator`, `PosturePolicy` and `DesignatorCache` |
| `postureutils.filters` | `Filters`, which narrows exception policies by framework name, and `ListingFilters` |
| `postureutils.controls` | `Control`, `PolicyRule`, `Framework` and related definitions |
| `postureutils.workload` | `BaseObject`, `WorkloadObject`, `ListWorkloads` and map helpers such as `inspect_map` |
| `postureutils.hostsensor` | `HostSensorDataEnvelope` for host sensor reports |
| `postureutils.localworkload` | `LocalWorkload`, a workload that records its source file path |
| `postureutils.objects` | `RegoResponseVectorObject`, and `new_object`, which picks the right wrapper for a mapping |
| `postureutils.results` | `RuleResponse`, `RuleReport` and `ResourcesIDs` |
| `postureutils.reports` | `ControlReport`, `FrameworkReport` and `PostureReport` |
| `postureutils.comparator` | `Comparator`, anchored regular-expression matching of workloads against designator attributes |
| `postureutils.exceptions` | `Processor`, which applies exception policies to reports |

## Examples

Severity from a base score:

```python
from postureutils.severity import control_severity_to_string, get_supported_severities

control_severity_to_string(7.5)   # "High"
get_supported_severities()        # ["Low", "Medium", "High", "Critical"]
```

Combining scan statuses:

```python
from postureutils.statuses import ScanningStatus, ScanningSubStatus, compare_status_and_sub_status

compare_status_and_sub_status(
    ScanningStatus.PASSED, ScanningStatus.SKIPPED,
    ScanningSubStatus.UNKNOWN, ScanningSubStatus.MANUAL_REVIEW,
)
# (ScanningStatus.SKIPPED, ScanningSubStatus.MANUAL_REVIEW)
```

Parsing a cluster name:

```python
from postureutils.cloud import GKEMetadata, InvalidClusterNameError

GKEMetadata("gke_project_zone_my-cluster").parse()  # ("gke_project_zone", "my-cluster")

try:
    GKEMetadata("gke_project_zone").parse()
except InvalidClusterNameError as err:
    print(err)
```

Wrapping an object mapping:

```python
from postureutils.objects import new_object

obj = new_object({
    "apiVersion": "apps/v1",
    "kind": "Deployment",
    "metadata": {"name": "web", "namespace": "default"},
})
obj.get_id()  # "apps/v1/default/Deployment/web"
```

Finding which exception policies apply to a rule:

```python
from postureutils.designators import PostureExceptionPolicy, PosturePolicy
from postureutils.exceptions import Processor

policy = PostureExceptionPolicy(posture_policies=[PosturePolicy(framework_name="MIT.*")])
processor = Processor()
processor.list_rule_exceptions([policy], "MITRE", "", "", "")  # [policy]
processor.list_rule_exceptions([policy], "NSA", "", "", "")    # []
```

Calculating attack paths:

```python
from postureutils.attacktrack import (
    AttackTrackAllPathsHandler, AttackTrackControlMock, AttackTrackStep,
    attack_track_mock, new_attack_track_controls_lookup,
)

track = attack_track_mock(AttackTrackStep(name="A", sub_steps=[AttackTrackStep(name="F")]))
controls = {
    "1": AttackTrackControlMock(control_id="1", categories=["A"]),
    "2": AttackTrackControlMock(control_id="2", categories=["F"]),
}
lookup = new_attack_track_controls_lookup([track], ["1", "2"], controls)
paths = AttackTrackAllPathsHandler(track, lookup).calculate_all_paths()
[[step.name for step in path] for path in paths]  # [["A", "F"]]
```

Any object with `get_attack_track_categories(name)`, such as a `Control`
from `postureutils.controls`, can stand in for the mock controls.

## What it does not do

This is a library only. It does not scan clusters, evaluate rules, fetch
exception policies or frameworks from anywhere, or store results. It has no
command-line tool and no HTTP server: `postureutils.httpapi` only defines
the request and response payloads and their conversion to and from
mappings.

## Running the tests

```
pytest
```